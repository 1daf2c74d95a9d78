"""Abstract base classes for dependency injection."""

from abc import ABC, abstractmethod


class CatalogueProvider(ABC):
    """Abstract base class for the word catalogue."""

    @abstractmethod
    def get_words(self, user_id: str = "default") -> list:
        """Return the catalogue as a list of Word objects."""
        pass


class LedgerStore(ABC):
    """Abstract base class for the append-only test ledger."""

    @abstractmethod
    def get_tests(self, user_id: str = "default") -> list:
        """Return all TestResult objects, oldest first."""
        pass

    @abstractmethod
    def append_test(self, test, user_id: str = "default") -> None:
        """Append one TestResult to the ledger."""
        pass

    @abstractmethod
    def get_word_performance(self, user_id: str = "default") -> dict:
        """Return {word_id: WordPerformance}."""
        pass

    @abstractmethod
    def set_word_performance(self, performance: dict, user_id: str = "default") -> None:
        """Replace the stored {word_id: WordPerformance} map."""
        pass


class Storage(CatalogueProvider, LedgerStore):
    """Catalogue and ledger storage plus host configuration."""

    @abstractmethod
    def load_config(self) -> dict:
        """Load configuration. Returns config dict."""
        pass

    @abstractmethod
    def save_words(self, words: list, user_id: str = "default") -> None:
        """Replace the word catalogue."""
        pass

    @abstractmethod
    def clear_ledger(self, user_id: str = "default") -> None:
        """Drop all tests and word performance, keeping the catalogue."""
        pass
