# API routes

from fastapi import APIRouter, Depends

from json_connector.common.metrics import track_request_time
from json_connector.config.settings import get_settings
from json_connector.ingest.connector import (
    Connector,
    ConnectorContext,
    ConnectorRequest,
    get_auth_type,
    get_config,
    is_admin_user,
)
from json_connector.storage.factory import get_cache_store

router = APIRouter()


def get_connector() -> Connector:
    """Fresh connector per request, bound to the shared cache store."""
    context = ConnectorContext.from_settings(get_cache_store(), get_settings())
    return Connector(context)


@router.get("/config")
def config():
    """Configuration form for the data source."""
    return get_config()


@router.get("/auth-type")
def auth_type():
    return get_auth_type()


@router.get("/admin")
def admin():
    return {"is_admin": is_admin_user()}


@router.post("/schema")
@track_request_time("schema")
def schema(request: ConnectorRequest, connector: Connector = Depends(get_connector)):
    """
    Infer the schema of the configured JSON source.

    - **configParams.url**: http(s) URL returning a JSON object or array
    - **configParams.cache**: cache the response in chunks
    - **configParams.cache_expiry_time**: cache lifetime in minutes
    """
    return connector.get_schema(request)


@router.post("/data")
@track_request_time("data")
def data(request: ConnectorRequest, connector: Connector = Depends(get_connector)):
    """
    Rows of the configured JSON source projected onto the requested fields.

    - **fields**: list of `{"name": <field id>}` in output column order
    """
    return connector.get_data(request)
