from fastapi import APIRouter

from red_mansion.api.routes import flows, login, qa, users, utils

api_router = APIRouter()
api_router.include_router(login.router)
api_router.include_router(users.router)
api_router.include_router(utils.router)
api_router.include_router(flows.router)
api_router.include_router(qa.router)
