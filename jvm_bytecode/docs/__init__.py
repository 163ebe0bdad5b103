from .description_store import DescriptionStore, FamilyKey, parse_family_key
from .jvms_client import JVMSClient

__all__ = [
    "DescriptionStore",
    "FamilyKey",
    "parse_family_key",
    "JVMSClient",
]
