import logging
import os
from typing import Any, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from mathsteps import InvalidProblemError, load_config, solve_problem
from mathsteps.config import get_settings

logging.basicConfig(
    level=get_settings()["log_level"],
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="MathSteps API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ProblemRequest(BaseModel):
    problem: str


class StepInfo(BaseModel):
    action: str
    math: str
    explanation: str
    result: Optional[Any] = None


class SolveResponse(BaseModel):
    type: str
    problem: str
    solution: Any
    steps: list[StepInfo]
    full_problem: Optional[str] = None


def _display(problem: str, limit: int) -> tuple:
    """Return ``(shown, full)``: *problem* cut to *limit* chars, plus the
    original when it had to be cut."""
    if len(problem) > limit:
        return f"{problem[:limit]}...", problem
    return problem, None


@app.get("/health")
def health():
    return {"status": "ok", "service": "MathSteps API"}


@app.post("/api/solve", response_model=SolveResponse, response_model_exclude_none=True)
def solve(req: ProblemRequest):
    config = load_config()
    problem = req.problem
    if not problem.strip():
        raise HTTPException(status_code=400, detail="Problem cannot be empty.")

    try:
        result = solve_problem(problem, config)
    except InvalidProblemError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Unhandled error in /api/solve")
        raise HTTPException(status_code=500, detail=f"Solver error: {str(e)}")

    shown, full = _display(problem, config.display_limit)
    payload = result.as_dict()
    if not result.solved:
        return JSONResponse(status_code=400, content={
            "error": "Unsolvable expression",
            "suggestion": "Try a different format or a simpler expression",
            "problem": shown,
            "type": payload["type"],
            "steps": payload["steps"],
        })

    return {
        "type": payload["type"],
        "problem": shown,
        "solution": payload["solution"],
        "steps": payload["steps"],
        "full_problem": full,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", 8000)))
