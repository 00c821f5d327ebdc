from fastapi import APIRouter, Depends

from app.dependencies import get_address_resolver
from app.schemas.common import ErrorResponse
from app.schemas.tokens import ResolvedAccountResponse
from app.services.addresses import AddressResolver

router = APIRouter()


@router.get("/resolve/{name}", response_model=ResolvedAccountResponse, responses={400: {"model": ErrorResponse}})
async def resolve_address(name: str, addresses: AddressResolver = Depends(get_address_resolver)):
    account = await addresses.resolve(name)
    return ResolvedAccountResponse(input=name, address=account.address, source=account.source)
