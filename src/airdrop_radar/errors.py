"""Exception types raised by the scraper and the analyzer."""


class RadarError(Exception):
    """Base class for all Airdrop Radar errors."""


class BrowserEnvironmentError(RadarError):
    """The browser runtime could not be started (missing executable, bad install)."""


class ScrapeError(RadarError):
    """A single post could not be scraped."""


class NavigationTimeoutError(ScrapeError):
    """Navigation did not settle before the configured timeout."""


class ExtractionError(ScrapeError):
    """The page loaded but the post content never rendered."""


class AnalysisUnavailableError(RadarError):
    """The remote analysis path cannot produce a result; use the local one."""


class RemoteAnalysisError(AnalysisUnavailableError):
    """Transport failure, non-success status, or timeout from the inference service."""


class MalformedResponseError(AnalysisUnavailableError):
    """The inference service answered, but not with a canonical analysis object."""
