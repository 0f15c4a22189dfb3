"""
Fatal acquisition errors.

Only these terminate an acquisition run. Every one of them leaves the
user a path to manual coordinate entry (map click); ``user_message``
carries that hint.
"""

MANUAL_SELECTION_HINT = "Klik pada peta untuk memilih lokasi manual."


class LocationAcquisitionError(Exception):
    """Base class for errors that end an acquisition run."""

    default_message = "Terjadi kesalahan saat kalibrasi GPS"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def user_message(self) -> str:
        """Message for the registration form, with the manual-selection hint."""
        return f"{self.message}\n{MANUAL_SELECTION_HINT}"


class InsufficientSamplesError(LocationAcquisitionError):
    """Fewer than min_samples readings after the attempt budget ran out."""

    default_message = "Tidak cukup pembacaan GPS yang valid"

    def __init__(self, collected: int, required: int):
        self.collected = collected
        self.required = required
        super().__init__(f"{self.default_message} ({collected}/{required})")


class AcquisitionTimeoutError(LocationAcquisitionError):
    """Overall deadline elapsed before min_samples readings were collected."""

    default_message = "Timeout: Tidak cukup pembacaan GPS"

    def __init__(self, collected: int, required: int):
        self.collected = collected
        self.required = required
        super().__init__(f"{self.default_message} ({collected}/{required})")


class OutOfBoundsError(LocationAcquisitionError):
    """Calibrated coordinate lies outside the geographic fence."""

    default_message = "Koordinat di luar wilayah layanan"
