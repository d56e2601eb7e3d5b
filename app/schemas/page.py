from pydantic import BaseModel
from typing import Any, Dict


class Page(BaseModel):
    """
    A server-composed page: the client renders `component` with `props`.
    """
    component: str
    props: Dict[str, Any] = {}
