"""REST controller for managing profiles.

Persistence is delegated entirely to ``ProfileRepository``. The only rules
enforced here are on the identifier: a create must not carry one, and an
update without one is treated as a create.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from loguru import logger

from src.api.constants import PROFILES_PATH
from src.api.schemas.profiles import ProfileRequest, ProfileResponse
from src.api.utils.headers import (
    create_entity_creation_alert,
    create_entity_deletion_alert,
    create_entity_update_alert,
)
from src.api.utils.responses import ORJSONResponse
from src.core.exceptions import BadRequestAlertError, NotFoundError
from src.domain.profiles.models import ENTITY_NAME, Profile
from src.domain.profiles.repository import ProfileRepository, get_profile_repository

router = APIRouter(prefix=PROFILES_PATH, tags=["profiles"])

Repository = Annotated[ProfileRepository, Depends(get_profile_repository)]


def _to_entity(profile: ProfileRequest) -> Profile:
    fields = profile.model_dump(exclude={"id"})
    if profile.id is not None:
        fields["id"] = profile.id
    return Profile(**fields)


def _body(profile: Profile) -> dict[str, object]:
    return ProfileResponse.model_validate(profile).model_dump(mode="json")


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ProfileResponse,
)
async def create_profile(profile: ProfileRequest, repository: Repository) -> Response:
    """Create a new profile.

    Returns 201 with the stored profile and its location, or 400 when the
    body already has an ID.
    """
    logger.debug("REST request to save Profile : {}", profile)
    if profile.id is not None:
        raise BadRequestAlertError(
            "A new profile cannot already have an ID", ENTITY_NAME, "idexists"
        )

    result = await repository.create(_to_entity(profile))
    return ORJSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=_body(result),
        headers={
            "Location": f"{PROFILES_PATH}/{result.id}",
            **create_entity_creation_alert(ENTITY_NAME, str(result.id)),
        },
    )


@router.put("", response_model=ProfileResponse)
async def update_profile(profile: ProfileRequest, repository: Repository) -> Response:
    """Replace an existing profile.

    A body without an ID is handled as a create. An ID that is not stored
    yields a new profile under a generated ID.
    """
    logger.debug("REST request to update Profile : {}", profile)
    if profile.id is None:
        return await create_profile(profile, repository)

    result = await repository.save(_to_entity(profile))
    return ORJSONResponse(
        status_code=status.HTTP_200_OK,
        content=_body(result),
        headers=create_entity_update_alert(ENTITY_NAME, str(result.id)),
    )


@router.get("", response_model=list[ProfileResponse])
async def get_all_profiles(
    repository: Repository,
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> list[Profile]:
    """List profiles ordered by ID."""
    logger.debug("REST request to get all Profiles")
    return await repository.get_all(skip=skip, limit=limit)


@router.get("/{profile_id}", response_model=ProfileResponse)
async def get_profile(profile_id: int, repository: Repository) -> Profile:
    """Get one profile, or 404."""
    logger.debug("REST request to get Profile : {}", profile_id)
    profile = await repository.get_by_id(profile_id)
    if profile is None:
        raise NotFoundError(
            f"Profile with ID {profile_id} not found",
            context={"entity_name": ENTITY_NAME, "id": profile_id},
        )
    return profile


@router.delete("/{profile_id}", status_code=status.HTTP_200_OK)
async def delete_profile(profile_id: int, repository: Repository) -> Response:
    """Delete one profile, or 404 when it does not exist."""
    logger.debug("REST request to delete Profile : {}", profile_id)
    if not await repository.delete(profile_id):
        raise NotFoundError(
            f"Profile with ID {profile_id} not found",
            context={"entity_name": ENTITY_NAME, "id": profile_id},
        )
    return Response(
        status_code=status.HTTP_200_OK,
        headers=create_entity_deletion_alert(ENTITY_NAME, str(profile_id)),
    )
