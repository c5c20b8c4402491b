# Error codes surfaced to API clients
ERR_AUTH = "AUTH_FAILED"
ERR_REMOTE = "REMOTE_FAILED"
ERR_EMPTY = "EMPTY_RESULT"
ERR_MODEL_NOT_LOADED = "MODEL_NOT_LOADED"
ERR_INFERENCE = "INFERENCE_FAILED"
ERR_PREDICTION_UNAVAILABLE = "PREDICTION_UNAVAILABLE"
ERR_DESCRIPTION_UNAVAILABLE = "DESCRIPTION_UNAVAILABLE"
ERR_NO_FRAME = "NO_FRAME"
ERR_UNKNOWN = "UNKNOWN"


class ArtVistaError(Exception):
    code = ERR_UNKNOWN


class ClassifierError(ArtVistaError):
    """Any failure of a single classifier. Drives the remote -> local fallback."""


class AuthError(ClassifierError):
    code = ERR_AUTH


class RemoteError(ClassifierError):
    code = ERR_REMOTE


class EmptyResultError(ClassifierError):
    code = ERR_EMPTY


class ModelNotLoadedError(ClassifierError):
    code = ERR_MODEL_NOT_LOADED


class InferenceError(ClassifierError):
    code = ERR_INFERENCE


class PredictionUnavailableError(ArtVistaError):
    """Both classifiers failed for one capture."""
    code = ERR_PREDICTION_UNAVAILABLE


class DescriptionUnavailableError(ArtVistaError):
    # Never leaves the description resolver
    code = ERR_DESCRIPTION_UNAVAILABLE
