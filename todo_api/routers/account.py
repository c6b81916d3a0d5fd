"""Account endpoints under /api/AccountAPI/<Action>."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from todo_api.schemas import (
    AuthResponse,
    ChangePasswordDto,
    ConfirmEmailDto,
    ForgotPasswordDto,
    LoginDto,
    RegisterDto,
    ResetPasswordDto,
    UserInfoDto,
)
from todo_api.services.account_service import (
    AccountExistsError,
    AccountService,
    AuthResult,
    IdentityOperationError,
    InvalidCredentialsError,
    LockedOutError,
    RoleAssignmentError,
    UserInfo,
    UserNotFoundError,
)
from todo_api.services.token_service import current_user_id

router = APIRouter(prefix="/api/AccountAPI", tags=["account"])


def _auth_ok(result: AuthResult) -> JSONResponse:
    body = AuthResponse(token=result.token, user_info=_info_dto(result.user_info))
    return JSONResponse(body.model_dump(by_alias=True))


def _info_dto(info: UserInfo) -> UserInfoDto:
    return UserInfoDto(role=info.role, email=info.email)


def _errors(status_code: int, exc: IdentityOperationError) -> JSONResponse:
    return JSONResponse({"errors": exc.errors}, status_code=status_code)


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"message": message}, status_code=status_code)


def _not_found() -> JSONResponse:
    return _message(404, "User not found.")


@router.get("/Users")
def users(_user_id: str = Depends(current_user_id), service: AccountService = Depends(AccountService)):
    return service.list_usernames()


@router.post("/Register")
def register(model: RegisterDto, service: AccountService = Depends(AccountService)):
    try:
        result = service.register(model.email, model.password, model.role)
    except AccountExistsError as exc:
        return JSONResponse({"error": str(exc)}, status_code=409)
    except RoleAssignmentError as exc:
        return _message(500, str(exc))
    except IdentityOperationError as exc:
        return _errors(500, exc)
    return _auth_ok(result)


@router.post("/Login")
def login(model: LoginDto, service: AccountService = Depends(AccountService)):
    try:
        result = service.login(model.email, model.password)
    except LockedOutError as exc:
        return _message(403, str(exc))
    except InvalidCredentialsError as exc:
        return _message(401, str(exc))
    return _auth_ok(result)


@router.post("/ConfirmEmail")
def confirm_email(model: ConfirmEmailDto, service: AccountService = Depends(AccountService)):
    # A 404 here reveals whether the email is registered.
    try:
        service.confirm_email(model.email, model.code)
    except UserNotFoundError:
        return Response(status_code=404)
    except IdentityOperationError as exc:
        return _errors(403, exc)
    return Response(status_code=200)


@router.post("/ForgotPassword")
def forgot_password(model: ForgotPasswordDto, service: AccountService = Depends(AccountService)):
    try:
        service.forgot_password(model.email)
    except UserNotFoundError:
        return _not_found()
    return Response(status_code=200)


@router.post("/ResetPassword")
def reset_password(model: ResetPasswordDto, service: AccountService = Depends(AccountService)):
    try:
        service.reset_password(model.email, model.code, model.password)
    except UserNotFoundError:
        return _not_found()
    except IdentityOperationError as exc:
        return _errors(500, exc)
    return Response(status_code=200)


@router.get("/UserInfo")
def user_info(user_id: str = Depends(current_user_id), service: AccountService = Depends(AccountService)):
    try:
        info = service.get_user_info(user_id)
    except UserNotFoundError:
        return _not_found()
    return _info_dto(info).model_dump(by_alias=True)


@router.post("/UpdateProfile")
def update_profile(
    model: UserInfoDto,
    user_id: str = Depends(current_user_id),
    service: AccountService = Depends(AccountService),
):
    try:
        service.update_profile(user_id, model.email)
    except UserNotFoundError:
        return _not_found()
    except IdentityOperationError as exc:
        return _errors(500, exc)
    return Response(status_code=200)


@router.post("/ChangePassword")
def change_password(
    model: ChangePasswordDto,
    user_id: str = Depends(current_user_id),
    service: AccountService = Depends(AccountService),
):
    try:
        service.change_password(user_id, model.old_password, model.new_password)
    except UserNotFoundError:
        return _not_found()
    except IdentityOperationError as exc:
        return _errors(403, exc)
    return Response(status_code=200)
