"""Serialized extraction run over a list of inputs.

Inputs are processed strictly in order, one at a time, so that supplier-name
resolution and category ordering depend only on input order. A failing source
is recorded and skipped; the run raises ScrapeRunError at the end if anything
failed.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, Sequence

from src.models.catalog import Catalog, ScrapeInput, ScrapeProgress, UrlInput
from src.models.domain import OCRQuality
from src.services.catalog_merger import (
    finalize_catalog,
    is_empty_result,
    merge_fragment,
    tag_variant_sources,
)
from src.services.errors import ExtractionError, MissingCredentialError, ScrapeRunError

logger = logging.getLogger(__name__)

EMPTY_RESULT_MESSAGE = "The model did not find any product data at this source."

ProgressCallback = Callable[[ScrapeProgress], None]


class FragmentExtractor(Protocol):
    async def extract(self, scrape_input: ScrapeInput, quality: OCRQuality) -> Catalog:
        ...


@dataclass
class ScrapeRunResult:
    catalog: Catalog
    errors: List[str] = field(default_factory=list)
    merged_sources: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _input_label(scrape_input: ScrapeInput) -> str:
    return "URL" if isinstance(scrape_input, UrlInput) else "file"


def _notify(on_progress: Optional[ProgressCallback], stage: str, current: int, total: int) -> None:
    if on_progress is not None:
        on_progress(ScrapeProgress(stage=stage, current=current, total=total))


async def collect_catalog(
    inputs: Sequence[ScrapeInput],
    extractor: FragmentExtractor,
    quality: OCRQuality = OCRQuality.HIGH,
    on_progress: Optional[ProgressCallback] = None,
) -> ScrapeRunResult:
    total = len(inputs)
    result = ScrapeRunResult(catalog=Catalog())
    _notify(on_progress, "Preparing inputs...", 0, total)

    for index, scrape_input in enumerate(inputs):
        source_name = scrape_input.source_name
        _notify(
            on_progress,
            f"Processing {_input_label(scrape_input)} {index + 1} of {total}...",
            index,
            total,
        )
        try:
            fragment = await extractor.extract(scrape_input, quality)
        except MissingCredentialError:
            raise
        except ExtractionError as e:
            logger.error(f"Extraction failed for {source_name}: {e}")
            result.errors.append(f"- {source_name}: {e}")
            continue
        except Exception as e:
            logger.exception(f"Unexpected failure extracting {source_name}")
            result.errors.append(f"- {source_name}: {e}")
            continue

        if is_empty_result(fragment, source_name):
            logger.warning(f"No product data found at {source_name}")
            result.errors.append(f"- {source_name}: {EMPTY_RESULT_MESSAGE}")
            continue

        tag_variant_sources(fragment, source_name)
        merge_fragment(result.catalog, fragment)
        result.merged_sources.append(source_name)

    _notify(on_progress, "Finalizing data...", total, total)
    finalize_catalog(result.catalog)
    logger.info(
        f"Scrape run finished: {len(result.merged_sources)} merged, {len(result.errors)} failed"
    )
    return result


async def run_scrape(
    inputs: Sequence[ScrapeInput],
    extractor: FragmentExtractor,
    quality: OCRQuality = OCRQuality.HIGH,
    on_progress: Optional[ProgressCallback] = None,
) -> Catalog:
    result = await collect_catalog(inputs, extractor, quality, on_progress)
    if result.errors:
        raise ScrapeRunError(result.errors, partial_catalog=result.catalog)
    return result.catalog
