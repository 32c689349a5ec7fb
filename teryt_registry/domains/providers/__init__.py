from .repositories import DuplicateProviderNameError, ProviderRepoError, ProviderRepository

__all__ = [
    "ProviderRepository",
    "ProviderRepoError",
    "DuplicateProviderNameError",
]
