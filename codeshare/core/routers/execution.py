from fastapi import APIRouter

from codeshare.core.schemas import ExecuteRequest, ExecuteResponse
from codeshare.core.services import ExecutionService


router = APIRouter()


@router.post(
    "/execute",
    response_model=ExecuteResponse,
    summary="Run code",
    description="""
## Run Code in the Sandbox

Forwards the program and its stdin to the execution sandbox. Compile and
runtime errors come back in `error` with a `200`.

Returns `503` with kind `sandbox_unavailable` when the sandbox cannot be
reached.
""",
)
async def execute_code(request_data: ExecuteRequest) -> ExecuteResponse:
    result = await ExecutionService.execute(
        language=request_data.language,
        code=request_data.code,
        input=request_data.input,
    )
    return ExecuteResponse(**result)
