from maasin_go.services.fares.service import DEFAULT_FARES, FareService

__all__ = ["DEFAULT_FARES", "FareService"]
