"""
Corpdata Gateway - Student Route Handlers
==========================================

What:  Student report search by class and section, and a single student by
       roll id, class and section.

`class` is a Python keyword, so the handlers name it class_name and map it
with an alias; the wire name stays "class".
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Path, Query

from gateway.database import ConnectionProvider, get_connection_provider
from gateway.docs import ROUTE_DOCS
from gateway.services.query_service import NO_MATCH_MESSAGE, query_service
from gateway.validation import validated

router = APIRouter()

SELECT_STUDENT_REPORTS = (
    "SELECT * FROM studentreport WHERE CLASS = :class_name AND SECTION = :section"
)
SELECT_STUDENT = (
    "SELECT * FROM student WHERE ROLLID = :roll_id AND CLASS = :class_name AND SECTION = :section"
)


@router.get("/students-report", response_model=None, **ROUTE_DOCS["students_report"])
async def students_report(
    class_name: str = Query(alias="class", description="Class", examples=["V"]),
    section: str = Query(description="Section", examples=["A"]),
    fields: Dict[str, Any] = Depends(validated("students_report")),
    provider: ConnectionProvider = Depends(get_connection_provider),
) -> Any:
    """Report rows (CLASS, SECTION, GRADE) of one class and section."""
    result = await query_service.search(
        provider,
        SELECT_STUDENT_REPORTS,
        {"class_name": fields["class"], "section": fields["section"]},
        not_found_message=NO_MATCH_MESSAGE,
    )
    return result.payload()


@router.get("/student/{class}", response_model=None, **ROUTE_DOCS["get_student"])
async def get_student(
    class_name: str = Path(alias="class", description="class", examples=["V"]),
    id: str = Query(description="Student id", examples=["15"]),
    section: str = Query(description="Sections", examples=["A"]),
    fields: Dict[str, Any] = Depends(validated("get_student")),
    provider: ConnectionProvider = Depends(get_connection_provider),
) -> Any:
    """
    One student by roll id, class and section.

    What:    `id` is bound as an integer to match the ROLLID column.
    Returns: The matching rows, or {"message": "Could not find the looking row"}.
    """
    result = await query_service.search(
        provider,
        SELECT_STUDENT,
        {
            "roll_id": fields["id"],
            "class_name": fields["class"],
            "section": fields["section"],
        },
        not_found_message=NO_MATCH_MESSAGE,
    )
    return result.payload()
