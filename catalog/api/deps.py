from fastapi import Depends, Request

from catalog.config import Settings
from catalog.infra.db import QueryGateway
from catalog.infra.storage_s3 import ObjectStore


def get_gateway(request: Request) -> QueryGateway:
    return request.app.state.gateway


def get_store(request: Request) -> ObjectStore:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


Gateway = Depends(get_gateway)
Store = Depends(get_store)
AppSettings = Depends(get_app_settings)
