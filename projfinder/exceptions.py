# projfinder/exceptions.py
class ProjfinderError(Exception):
    # base exception for all application-specific errors.
    pass

class ConfigError(ProjfinderError):
    # errors related to configuration.
    pass

class DiscoveryError(ProjfinderError):
    # errors while setting up directory discovery (e.g. bad ignore patterns).
    pass

class DetectionError(ProjfinderError):
    # errors raised inside a root detection backend.
    pass

class PersistenceError(ProjfinderError):
    # errors reading or writing the project list file.
    pass
