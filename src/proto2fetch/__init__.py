from proto2fetch.logger import get_logger

__version__ = "1.0.0"

log = get_logger("proto2fetch")
