class RetargetError(Exception):
    pass


class DetectionFailure(RetargetError):
    def __init__(self, modality: str, cause: Exception):
        super().__init__(f"{modality} detector failed: {cause}")
        self.modality = modality
        self.cause = cause


class MissingSignal(RetargetError):
    # Raised when a landmark set is shorter than the index contract requires.
    def __init__(self, source: str, index: int, available: int):
        super().__init__(f"{source} landmark {index} missing ({available} available)")
        self.source = source
        self.index = index
        self.available = available


class RigBindingAbsent(RetargetError):
    pass


class SettingsError(ValueError):
    pass
