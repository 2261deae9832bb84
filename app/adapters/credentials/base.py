from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ValidIdentity:
	"""A token accepted by the identity provider.

	Attributes:
		identity_id: Stable account id (used as the comment cooldown key).
		display_name: Public login name shown next to comments.
	"""

	identity_id: str
	display_name: str


@dataclass(frozen=True)
class InvalidToken:
	"""A token that could not be verified.

	Rejection, transport failure and malformed responses all end up here;
	``reason`` is for logs only.
	"""

	reason: str


VerificationOutcome = ValidIdentity | InvalidToken


class AbstractCredentialVerifier(ABC):
	"""Interface for clients that turn an opaque login token into an identity."""

	@abstractmethod
	async def verify(self, token: object) -> VerificationOutcome:
		"""Verify a login token with the identity provider.

		Args:
			token: Token as received from the client. Anything that is not a
				well-formed string is rejected without a network call.

		Returns:
			VerificationOutcome: ValidIdentity or InvalidToken. Never raises for
				provider or transport failures.
		"""
		...

	async def aclose(self) -> None:
		"""Release network resources held by the verifier."""
		return None
