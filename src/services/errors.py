from typing import List, Optional

from src.models.catalog import Catalog


class InputValidationError(ValueError):
    """Raised before a run starts when the submitted inputs are unusable."""


class ExtractionError(Exception):
    """A single source could not be turned into a catalog fragment."""


class CatalogParseError(ExtractionError):
    """The model answered, but not with something matching the catalog schema."""


class LLMError(Exception):
    """Transport or HTTP failure while talking to the model API."""


class MissingCredentialError(Exception):
    """No API key is configured for the model provider.

    This is a configuration problem, not a per-run failure, and retrying the
    same request will not help.
    """


class ScrapeRunError(Exception):
    def __init__(self, errors: List[str], partial_catalog: Optional[Catalog] = None):
        self.errors = list(errors)
        self.partial_catalog = partial_catalog
        super().__init__(
            f"Scraping completed with {len(self.errors)} error(s):\n\n" + "\n".join(self.errors)
        )
