import logging
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)


class DataPipeline(ABC):
    """
    Abstract base class for feed pipelines.
    Follows an Extract -> Transform -> Load (ETL) pattern.
    Errors raised by any step propagate; load() only runs after a clean transform.
    """

    def __init__(self, name: str):
        self.name = name

    def run(self) -> Any:
        """
        Orchestrates the pipeline execution and returns the transformed result.
        """
        logger.info(f"🚀 STEP: {self.name.upper()}")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        raw_data = self.extract()

        # --- 2. TRANSFORM ---
        result = self.transform(raw_data)

        # --- 3. LOAD ---
        self.load(result)

        logger.info(f"✅ {self.name.capitalize()} pipeline finished.")
        logger.info("=" * 60)
        return result

    @abstractmethod
    def extract(self) -> Any:
        """
        Responsible for fetching and parsing the raw sources.
        """
        pass

    @abstractmethod
    def transform(self, raw_data: Any) -> Any:
        """
        Responsible for joining the parsed sources into the final result.
        """
        pass

    def load(self, result: Any):
        """
        Hands the result to its consumer. The default does nothing.
        """
        pass
