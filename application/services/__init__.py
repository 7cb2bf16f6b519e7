from .conversion_service import ConversionService
from .rate_service import RateService

__all__ = ['ConversionService', 'RateService']
