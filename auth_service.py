from auth_context import AuthContext
from client import ApiClient
from schemas import (
    AuthenticationResponse,
    CreateUserResponse,
    LoginRequest,
    RegisterRequest,
    to_wire,
)


class AuthService:
    """Sign users in and out and register new accounts."""

    def __init__(self, client: ApiClient, auth: AuthContext) -> None:
        self.client = client
        self.auth = auth

    def login(self, username: str, password: str) -> AuthenticationResponse:
        """Authenticate and keep the returned token in the auth context."""
        req = LoginRequest(username=username, password=password)
        data = self.client.post("/auth/login", json=to_wire(req))
        resp = AuthenticationResponse.model_validate(data)
        self.auth.store(resp.username, resp.token)
        return resp

    def register(
        self, username: str, password: str, confirm_password: str
    ) -> CreateUserResponse:
        """Create an account. The user still has to sign in afterwards."""
        req = RegisterRequest(
            username=username, password=password, confirm_password=confirm_password
        )
        data = self.client.post("/auth/register", json=to_wire(req))
        return CreateUserResponse.model_validate(data)

    def logout(self) -> None:
        self.auth.clear()
