"""Client endpoints - client records, stats lookup and tier recalculation"""

from fastapi import APIRouter, Depends, Response

from smartshop.api.dependencies import get_client_service
from smartshop.api.v1.schemas import ClientCreateRequest, ClientListResponse, ClientResponse, TierResponse
from smartshop.services.clients import ClientService

router = APIRouter()


@router.get("/clients", response_model=ClientListResponse)
def list_clients(service: ClientService = Depends(get_client_service)):
    clients = service.list_clients()
    return ClientListResponse(
        clients=[ClientResponse.from_domain(client) for client in clients],
        total=len(clients),
    )


@router.post("/clients", response_model=ClientResponse, status_code=201)
def create_client(request_body: ClientCreateRequest, service: ClientService = Depends(get_client_service)):
    """Register a client; new clients start at BASIC with no order history"""
    return ClientResponse.from_domain(service.create_client(request_body.name, request_body.email))


@router.get("/clients/{client_id}", response_model=ClientResponse)
def get_client(client_id: int, service: ClientService = Depends(get_client_service)):
    return ClientResponse.from_domain(service.get_client(client_id))


@router.put("/clients/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: int,
    request_body: ClientCreateRequest,
    service: ClientService = Depends(get_client_service),
):
    return ClientResponse.from_domain(service.update_client(client_id, request_body.name, request_body.email))


@router.delete("/clients/{client_id}", status_code=204)
def delete_client(client_id: int, service: ClientService = Depends(get_client_service)):
    """Only clients without orders can be removed"""
    service.delete_client(client_id)
    return Response(status_code=204)


@router.post("/clients/{client_id}/tier", response_model=TierResponse)
def recalculate_tier(client_id: int, service: ClientService = Depends(get_client_service)):
    """Re-derive the tier from the client's persisted order stats"""
    return TierResponse(client_id=client_id, tier=service.recalculate_tier(client_id))
