"""Cooking instruction generation endpoint."""

from fastapi import APIRouter, Depends

from preppal.core.auth import AuthUser, require_auth
from preppal.schemas.schemas import GenerateInstructionsRequest, GenerateInstructionsResponse
from preppal.services.instructions_service import instruction_service

router = APIRouter(prefix="/api", tags=["instructions"])


@router.post("/generate-instructions", response_model=GenerateInstructionsResponse)
async def generate_instructions(
    request: GenerateInstructionsRequest,
    user: AuthUser = Depends(require_auth)
):
    """
    Generate step-by-step cooking instructions for a recipe draft.

    Nothing is saved; the client puts the steps into the recipe form.
    """
    instructions = await instruction_service.generate_cooking_instructions(
        request.title,
        [i.model_dump() for i in request.ingredients],
        request.tools,
    )
    return GenerateInstructionsResponse(instructions=instructions)
