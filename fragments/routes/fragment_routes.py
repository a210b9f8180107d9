"""Fragment API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Request, Response, status

from common.logging_config import get_logger
from fragments import config
from fragments.auth import get_current_user
from fragments.exceptions import PayloadTooLargeError
from fragments.models.fragment import Fragment
from fragments.schemas.fragments import (
    FragmentMetadata,
    FragmentResponse,
    ListFragmentsResponse,
    StatusResponse,
    UpdateFragmentResponse
)
from fragments.services.fragment_service import FragmentService

logger = get_logger(__name__)

router = APIRouter(prefix="/v1/fragments", tags=["Fragments"])


def get_fragment_service(request: Request) -> FragmentService:
    return FragmentService(request.app.state.backend)


def to_metadata(fragment: Fragment) -> FragmentMetadata:
    return FragmentMetadata.model_validate(fragment.to_dict())


async def read_body(request: Request) -> bytes:
    """
    Read the raw request body, enforcing MAX_FRAGMENT_BYTES.
    """
    limit = config.MAX_FRAGMENT_BYTES

    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise PayloadTooLargeError(f"Fragment data exceeds {limit} bytes")

    body = await request.body()
    if len(body) > limit:
        raise PayloadTooLargeError(f"Fragment data exceeds {limit} bytes")
    return body


@router.get("", response_model=ListFragmentsResponse)
async def list_fragments(
    expand: Optional[str] = Query(None, description="Set to 1 to return full metadata"),
    current_user: str = Depends(get_current_user),
    service: FragmentService = Depends(get_fragment_service)
):
    """
    List the authenticated user's fragments.

    Parameters:
        - expand: "1" returns full metadata instead of ids
        - Authorization header: Basic credentials (required)

    Returns:
        - fragments: Fragment ids, or metadata objects when expanded
    """
    expanded = expand == "1"
    fragments = service.list_fragments(current_user, expand=expanded)

    logger.info(f"Fragments listed [user_id={current_user}] count={len(fragments)}")

    if expanded:
        return ListFragmentsResponse(fragments=[to_metadata(fragment) for fragment in fragments])
    return ListFragmentsResponse(fragments=fragments)


@router.post("", response_model=FragmentResponse, status_code=status.HTTP_201_CREATED)
async def create_fragment(
    request: Request,
    response: Response,
    content_type: Optional[str] = Header(None),
    current_user: str = Depends(get_current_user),
    service: FragmentService = Depends(get_fragment_service)
):
    """
    Create a fragment from the raw request body.

    Parameters:
        - Content-Type header: media type of the body (text/* or application/json)
        - body: fragment data
        - Authorization header: Basic credentials (required)

    Returns:
        - fragment: Metadata of the created fragment
        - Location header: URL of the new fragment

    Raises:
        - 400: Missing or malformed Content-Type
        - 401: Missing or invalid credentials
        - 413: Body too large
        - 415: Unsupported Content-Type
    """
    body = await read_body(request)

    fragment = service.create_fragment(current_user, content_type, body)

    base_url = config.API_URL or str(request.base_url)
    response.headers["Location"] = f"{base_url.rstrip('/')}/v1/fragments/{fragment.id}"

    return FragmentResponse(fragment=to_metadata(fragment))


@router.get("/{fragment_id}/info", response_model=FragmentResponse)
async def get_fragment_info(
    fragment_id: str,
    current_user: str = Depends(get_current_user),
    service: FragmentService = Depends(get_fragment_service)
):
    """
    Return a fragment's metadata without its data.

    Raises:
        - 401: Missing or invalid credentials
        - 404: Fragment not found
    """
    fragment = service.get_fragment(current_user, fragment_id)
    return FragmentResponse(fragment=to_metadata(fragment))


@router.get("/{fragment_ref}")
async def get_fragment(
    fragment_ref: str,
    current_user: str = Depends(get_current_user),
    service: FragmentService = Depends(get_fragment_service)
):
    """
    Return a fragment's data, optionally converted.

    Parameters:
        - fragment_ref: Fragment id, optionally with an extension
                        (e.g. "<id>.html") naming the target format

    Raises:
        - 401: Missing or invalid credentials
        - 404: Fragment not found
        - 415: Unknown extension, unsupported or failed conversion
    """
    rendered = service.read_fragment(current_user, fragment_ref)

    return Response(content=rendered.data, media_type=rendered.content_type)


@router.put("/{fragment_id}", response_model=UpdateFragmentResponse)
async def update_fragment(
    fragment_id: str,
    request: Request,
    content_type: Optional[str] = Header(None),
    current_user: str = Depends(get_current_user),
    service: FragmentService = Depends(get_fragment_service)
):
    """
    Replace a fragment's data. The Content-Type must match the original.

    Raises:
        - 400: Missing, malformed or different Content-Type
        - 401: Missing or invalid credentials
        - 404: Fragment not found
        - 413: Body too large
    """
    body = await read_body(request)

    fragment = service.update_fragment(current_user, fragment_id, content_type, body)

    return UpdateFragmentResponse(fragment=to_metadata(fragment), formats=fragment.formats)


@router.delete("/{fragment_id}", response_model=StatusResponse)
async def delete_fragment(
    fragment_id: str,
    current_user: str = Depends(get_current_user),
    service: FragmentService = Depends(get_fragment_service)
):
    """
    Delete a fragment's metadata and data.

    Raises:
        - 401: Missing or invalid credentials
        - 404: Fragment not found
        - 500: Storage failure (one of the two records may remain)
    """
    service.delete_fragment(current_user, fragment_id)
    logger.info(f"Fragment deleted [user_id={current_user}] [fragment_id={fragment_id}]")
    return StatusResponse()
