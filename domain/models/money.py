from decimal import ROUND_HALF_UP, Context, Decimal, InvalidOperation

from domain.exceptions.currency import ValidationError

# ROUND_HALF_UP rounds ties away from zero: 0.125 -> 0.13, -0.125 -> -0.13.
# 18-decimal tokens times large USD prices need more than the default 28 digits.
MONEY_CONTEXT = Context(prec=64, rounding=ROUND_HALF_UP)


def to_decimal(value: str | int | float | Decimal) -> Decimal:
	if isinstance(value, bool):
		raise ValueError(f'not a number: {value!r}')
	if isinstance(value, Decimal):
		result = value
	else:
		try:
			# str() first so floats keep their shortest repr instead of binary noise
			result = Decimal(str(value))
		except InvalidOperation as e:
			raise ValueError(f'not a number: {value!r}') from e
	if not result.is_finite():
		raise ValueError(f'not a finite number: {value!r}')
	return result


def parse_amount(raw: str) -> Decimal:
	try:
		return to_decimal(raw.strip())
	except ValueError as e:
		raise ValidationError(f'invalid amount: {raw!r}') from e


def multiply(a: Decimal, b: Decimal) -> Decimal:
	return MONEY_CONTEXT.multiply(a, b)


def divide(a: Decimal, b: Decimal) -> Decimal:
	return MONEY_CONTEXT.divide(a, b)


def round_to_places(value: Decimal, places: int) -> Decimal:
	"""Round to exactly ``places`` fractional digits, ties away from zero.

	The working precision grows with the integer part of ``value`` so that
	large amounts keep every fractional digit instead of failing to quantize.
	"""
	if places < 0:
		raise ValueError(f'decimal places must be non-negative, got {places}')
	context = MONEY_CONTEXT.copy()
	context.prec = max(MONEY_CONTEXT.prec, value.adjusted() + 1 + places)
	return value.quantize(Decimal(1).scaleb(-places), context=context)
