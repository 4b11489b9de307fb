"""Custom exception classes for the application."""


class PriceTrackerException(Exception):
    """Base exception for all price tracker errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(PriceTrackerException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} with identifier '{identifier}' not found")


class ScraperNotRegisteredError(NotFoundError):
    """Raised when no scraper is registered for a scraper type."""

    def __init__(self, scraper_type):
        super().__init__("Scraper", scraper_type)


class InvalidJobStateError(PriceTrackerException):
    """Raised when a scraping job is asked to run outside the PENDING state."""

    def __init__(self, job_id, status):
        self.job_id = job_id
        self.status = status
        super().__init__(f"Job {job_id} cannot be run: current status is {status}")


class ScraperError(PriceTrackerException):
    """Raised when a scraper encounters an unrecoverable error."""

    def __init__(self, site: str, message: str):
        super().__init__(f"Scraper error for {site}: {message}")
