"""
Service credentials for privileged writes.

An organization is created before any of its users exist, so there is no
request-scoped identity to authorize the write. Instead, each trusted entry
point (provisioning API key, verified Stripe webhook, reconciliation command)
mints a ServiceCredential with only the scopes it needs and passes it down
the call chain. Record-store functions check the scope before writing.
"""

from dataclasses import dataclass, field

from apps.onboarding.exceptions import CredentialScopeError


class Scopes:
    """Scope names understood by the organization record store."""

    ORGANIZATIONS_CREATE = "organizations:create"
    ORGANIZATIONS_ACTIVATE = "organizations:activate"
    ORGANIZATIONS_RECONCILE = "organizations:reconcile"


@dataclass(frozen=True)
class ServiceCredential:
    """
    Narrowly-scoped internal capability.

    Attributes:
        principal: Who minted the credential, e.g. 'provisioning-api', 'stripe-webhook'
        scopes: Operations this credential may perform
    """

    principal: str
    scopes: frozenset[str] = field(default_factory=frozenset)

    def require(self, scope: str) -> None:
        """Raise CredentialScopeError unless the scope is granted."""
        if scope not in self.scopes:
            raise CredentialScopeError(self.principal, scope)

    @classmethod
    def for_provisioning(cls) -> "ServiceCredential":
        return cls("provisioning-api", frozenset({Scopes.ORGANIZATIONS_CREATE}))

    @classmethod
    def for_stripe_webhook(cls) -> "ServiceCredential":
        return cls("stripe-webhook", frozenset({Scopes.ORGANIZATIONS_ACTIVATE}))

    @classmethod
    def for_reconciliation(cls) -> "ServiceCredential":
        return cls(
            "onboarding-reconciler",
            frozenset({Scopes.ORGANIZATIONS_ACTIVATE, Scopes.ORGANIZATIONS_RECONCILE}),
        )
