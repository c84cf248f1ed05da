from typing import Optional
from pydantic import BaseModel


class ProjectInfo(BaseModel):
    """Model representing the project the server is bound to"""

    project_path: Optional[str] = None
    workflow_dir: Optional[str] = None
    prompts_dir: Optional[str] = None
