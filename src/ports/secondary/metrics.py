from abc import ABC, abstractmethod


class IMetrics(ABC):
    @abstractmethod
    def record_resolution(self, outcome: str) -> None:
        pass

    @abstractmethod
    def record_build_duration(self, status: str, duration: float) -> None:
        pass

    @abstractmethod
    def record_download(self, outcome: str) -> None:
        pass
