"""Domain exceptions raised by repositories and route handlers.

Each exception carries a short error title and a ``code`` that the API layer
maps onto an HTTP status, so handlers can raise without knowing about HTTP.
"""


class EnrichmentError(Exception):
    """Base class for enrichment tracker errors."""

    code = "INTERNAL"
    title = "Internal server error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class JobNotFoundError(EnrichmentError):
    code = "NOT_FOUND"
    title = "Job not found"

    def __init__(self, job_id: str):
        super().__init__(f"No enrichment job with id {job_id}")
        self.job_id = job_id


class FactNotFoundError(EnrichmentError):
    code = "NOT_FOUND"
    title = "Fact not found"

    def __init__(self, fact_id: str):
        super().__init__(f"No fact with id {fact_id}")
        self.fact_id = fact_id


class OrganizationNotFoundError(EnrichmentError):
    code = "NOT_FOUND"
    title = "Organization not found"

    def __init__(self, domain: str):
        super().__init__(f"No data found for domain: {domain}")
        self.domain = domain


class InvalidDomainError(EnrichmentError):
    code = "INVALID_INPUT"
    title = "Invalid domain"

    def __init__(self, domain: str):
        super().__init__(f"Invalid domain format: {domain!r}")
        self.domain = domain


class InvalidStateError(EnrichmentError):
    """A job cannot move to the requested state from its current one."""

    code = "CONFLICT"
    title = "Invalid job state"

    def __init__(self, job_id: str, current: str, action: str):
        super().__init__(f"Cannot {action} job {job_id} while it is {current}")
        self.job_id = job_id
        self.current = current
        self.action = action


class MissingParameterError(EnrichmentError):
    code = "INVALID_INPUT"

    def __init__(self, name: str):
        super().__init__(f"Pass the {name} as a query parameter")
        self.title = f"{name.capitalize()} parameter is required"
        self.name = name
