"""Lightweight MCP-aligned server exposing statement import tools over FastAPI."""

import logging
from datetime import datetime
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import Field

import config
from aggregation import Clock
from column_mapping import detect_statement_template, infer_csv_mapping, rank_template_choices
from csv_parser import parse_csv
from growth import build_earnings_growth_series
from models import (
    CamelModel,
    CsvMapping,
    GrowthPoint,
    ImportOutcome,
    StatementDraft,
    StatementTemplate,
    TemplateChoice,
    TemplateMatch,
)
from process_statements import import_statement
from statement_templates import TemplateRegistry, load_registry

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("statement_tools")

app = FastAPI(title="Statement Import Tools", version="0.1.0")


@lru_cache(maxsize=1)
def get_registry() -> TemplateRegistry:
    return load_registry(config.TEMPLATES_PATH)


def get_clock() -> Clock:
    return datetime.now


@app.get("/templates", response_model=List[StatementTemplate])
async def list_templates(registry: TemplateRegistry = Depends(get_registry)):
    return list(registry.templates)


@app.get("/templates/{template_id}", response_model=StatementTemplate)
async def get_template(template_id: str, registry: TemplateRegistry = Depends(get_registry)):
    template = registry.get(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Unknown template: {template_id}")
    return template


class ParseCsvRequest(CamelModel):
    text: str


class ParseCsvResponse(CamelModel):
    headers: List[str]
    rows: List[List[str]]


@app.post("/tools/parse_csv", response_model=ParseCsvResponse)
async def parse_csv_tool(req: ParseCsvRequest):
    parsed = parse_csv(req.text)
    if not parsed:
        return ParseCsvResponse(headers=[], rows=[])
    return ParseCsvResponse(headers=parsed[0], rows=parsed[1:])


class DetectTemplateRequest(CamelModel):
    headers: List[str] = Field(..., description="Raw header row of the CSV export")


class DetectTemplateResponse(CamelModel):
    match: Optional[TemplateMatch]
    choices: List[TemplateChoice]
    inferred: CsvMapping


@app.post("/tools/detect_template", response_model=DetectTemplateResponse)
async def detect_template(req: DetectTemplateRequest, registry: TemplateRegistry = Depends(get_registry)):
    return DetectTemplateResponse(
        match=detect_statement_template(req.headers, registry),
        choices=rank_template_choices(req.headers, registry),
        inferred=infer_csv_mapping(req.headers),
    )


class ImportStatementRequest(CamelModel):
    file_name: str
    content: str
    mime_type: Optional[str] = None
    file_size: Optional[int] = Field(None, ge=0)
    file_uri: str = ""
    template_id: Optional[str] = "auto"
    currency: str = config.DEFAULT_CURRENCY
    currency_symbol: str = config.DEFAULT_CURRENCY_SYMBOL


@app.post("/tools/import_statement", response_model=ImportOutcome)
async def import_statement_tool(
    req: ImportStatementRequest,
    registry: TemplateRegistry = Depends(get_registry),
    clock: Clock = Depends(get_clock),
):
    outcome = import_statement(
        req.file_name,
        req.content,
        req.currency,
        req.currency_symbol,
        mime_type=req.mime_type,
        file_size=req.file_size,
        file_uri=req.file_uri,
        template_id=req.template_id,
        registry=registry,
        clock=clock,
    )
    logger.info(
        "Imported %s as %s (%s, %d transactions)",
        req.file_name,
        outcome.file.parse_method,
        outcome.file.parse_status,
        outcome.transaction_count,
    )
    return outcome


class GrowthSeriesRequest(CamelModel):
    statements: List[StatementDraft]


@app.post("/tools/growth_series", response_model=List[GrowthPoint])
async def growth_series(req: GrowthSeriesRequest):
    return build_earnings_growth_series(req.statements)


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("mcp_server:app", host=config.API_HOST, port=config.API_PORT, reload=True)
