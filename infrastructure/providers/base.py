from abc import ABC, abstractmethod
from collections.abc import Sequence
from decimal import Decimal

BASE_CURRENCY = 'USD'


class RateProvider(ABC):
	"""Source of rates expressed relative to the implicit ``BASE_CURRENCY``."""

	@property
	@abstractmethod
	def name(self) -> str: ...

	@property
	@abstractmethod
	def source_info(self) -> str: ...

	@abstractmethod
	async def get_rates(
		self, currencies: Sequence[str], timeout: float | None = None
	) -> tuple[dict[str, Decimal], str]:
		"""Return ``(rates, source_info)`` for the requested currency codes.

		``timeout`` bounds the whole fetch in seconds; ``None`` leaves it to the
		provider.
		"""
		...

	async def close(self) -> None:
		return None
