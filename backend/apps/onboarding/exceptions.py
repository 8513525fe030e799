"""
Exceptions for the onboarding saga.

Each error knows the HTTP status the provisioning endpoint answers with and
a message that is safe to show the caller. Internal detail (Stripe error
bodies, database errors) goes to the logs only.
"""


class OnboardingError(Exception):
    """Base exception for onboarding errors."""

    status_code = 500
    public_message = "Organization onboarding failed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)

    @property
    def response_message(self) -> str:
        return self.public_message


class ValidationError(OnboardingError):
    """Missing or malformed input; raised before any external call."""

    status_code = 400

    @property
    def response_message(self) -> str:
        return str(self)


class AllocationExhausted(OnboardingError):
    """Every subdomain candidate for the name is already taken."""

    status_code = 409
    public_message = "Could not allocate a unique subdomain for this organization name."

    def __init__(self, base_subdomain: str, attempts: int):
        super().__init__(f"All {attempts} subdomain candidates for '{base_subdomain}' are taken")
        self.base_subdomain = base_subdomain
        self.attempts = attempts


class ExternalServiceError(OnboardingError):
    """A payment gateway call (price or checkout session) failed or timed out."""

    status_code = 502
    public_message = "Payment provider request failed. Please try again."

    def __init__(self, message: str, *, service: str = "stripe"):
        super().__init__(message)
        self.service = service


class PersistenceError(OnboardingError):
    """Record store create/update failed."""

    status_code = 500
    public_message = "Could not save the organization."


class OrganizationNotFound(OnboardingError):
    """No organization with the given id."""

    status_code = 404
    public_message = "Organization not found."

    def __init__(self, org_id: int | str):
        super().__init__(f"Organization {org_id} not found")
        self.org_id = org_id


class CredentialScopeError(OnboardingError):
    """A service credential lacks the scope an operation requires."""

    status_code = 403
    public_message = "Not permitted to perform this operation."

    def __init__(self, principal: str, scope: str):
        super().__init__(f"Credential '{principal}' lacks scope '{scope}'")
        self.principal = principal
        self.scope = scope


class SignatureError(OnboardingError):
    """Webhook signature or payload did not verify."""

    status_code = 400
    public_message = "Invalid webhook signature."

    @property
    def response_message(self) -> str:
        return str(self)


class MalformedEventError(OnboardingError):
    """Verified webhook event lacks the metadata needed to act on it."""

    status_code = 200

    def __init__(self, message: str, *, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []


class InviteError(OnboardingError):
    """Admin invitation could not be issued after activation."""

    public_message = "Admin invitation failed."
