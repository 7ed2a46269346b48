"""Core layer between the MPD facade and an embedding script environment.

Classes:
    HandleTable: Owns connections handed out as opaque handles.
    MpdBindings: Flat, name-keyed function table returning Ok/Err values.
    ConfigManager: QSettings wrapper for saved connection defaults.
"""

from mpdctl.core.bindings import Err, ErrorKind, MpdBindings, Ok, Result
from mpdctl.core.config import ConfigManager, ConnectionSettings
from mpdctl.core.handles import Handle, HandleTable

__all__ = [
    "ConfigManager",
    "ConnectionSettings",
    "Err",
    "ErrorKind",
    "Handle",
    "HandleTable",
    "MpdBindings",
    "Ok",
    "Result",
]
