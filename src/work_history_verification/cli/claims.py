"""
YAML claims file loading for the CLI.

Example claims file::

    organization_id: org-1
    employee_id: recruiter-7
    candidate:
      candidate_id: cand-42
      first_name: Asha
      last_name: Rao
    work_history:
      - company_id: 101
        company_name: Infosys Ltd. (Bangalore)
        designation: Engineer
        years: Jan 2019 - Mar 2022
"""

from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, Field

from work_history_verification.domain.work_history.models import (
    CandidateProfile,
    ClaimedEmployment,
)
from work_history_verification.utils.logging import get_logger

logger = get_logger(__name__)


class ClaimsFile(BaseModel):
    """Candidate, caller identity and claimed work history."""

    candidate: CandidateProfile
    organization_id: Optional[str] = None
    employee_id: Optional[str] = None
    work_history: List[ClaimedEmployment] = Field(default_factory=list)


def load_claims_file(path: Union[str, Path]) -> ClaimsFile:
    """
    Load and validate a claims file.

    Raises:
        FileNotFoundError: The file does not exist.
        yaml.YAMLError: The file is not valid YAML.
        pydantic.ValidationError: Required fields are missing.
    """
    claims_path = Path(path)
    try:
        with open(claims_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error("claims_file.yaml_parse_error", path=str(claims_path), error=str(e))
        raise

    claims = ClaimsFile.model_validate(data or {})
    logger.info(
        "claims_file.loaded",
        path=str(claims_path),
        candidate_id=claims.candidate.candidate_id,
        claim_count=len(claims.work_history),
    )
    return claims
