"""Error taxonomy shared by the services and the HTTP layer.

Services raise these; the app factory turns them into
``{"error": <category>, "detail": <text>}`` responses.
"""


class ServiceError(Exception):
    status_code = 500
    category = "error"

    def __init__(self, detail=None):
        super().__init__(detail or self.__class__.__name__)
        self.detail = detail or self.__class__.__name__

    def to_dict(self):
        return {"error": self.category, "detail": self.detail}


class InvalidInput(ServiceError):
    status_code = 400
    category = "invalid_input"


class InvalidState(ServiceError):
    status_code = 400
    category = "invalid_state"


class Unauthorized(ServiceError):
    status_code = 401
    category = "unauthorized"


class Forbidden(ServiceError):
    status_code = 403
    category = "forbidden"


class NotFound(ServiceError):
    status_code = 404
    category = "not_found"


class Conflict(ServiceError):
    status_code = 409
    category = "conflict"


class Gone(ServiceError):
    status_code = 410
    category = "gone"


class Dependency(ServiceError):
    status_code = 500
    category = "dependency"
