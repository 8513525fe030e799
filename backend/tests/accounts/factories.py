"""
Builders for Stytch SDK objects used in tests.
"""

from stytch.core.response_base import StytchError, StytchErrorDetails


def make_stytch_error(error_type: str, error_message: str = "Stytch error", status_code: int = 400) -> StytchError:
    return StytchError(
        StytchErrorDetails(
            status_code=status_code,
            request_id="req-123",
            error_type=error_type,
            error_message=error_message,
            error_url="https://stytch.com/docs",
        )
    )
