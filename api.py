"""
FastAPI REST API for sqlseed

Provides endpoints for:
- Archive generation from an uploaded schema document
- Schema inspection (generation order, row counts, generators)
- Configuration presets
"""

from fastapi import FastAPI, File, Form, UploadFile, HTTPException, Header, Request
from fastapi.responses import StreamingResponse, JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime
import io
import json
import logging
import os

# Import our modules
from sqlseed import __version__
from sqlseed.config import ConfigLoader, get_default_config
from sqlseed.errors import SQLSeedError, SchemaError
from sqlseed.orchestrator import DataOrchestrator
from sqlseed.utils import setup_logging

# Configure logging
setup_logging(level=logging.INFO)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="sqlseed API",
    description="Generate referentially consistent SQL test data from a table schema",
    version=__version__
)

# CORS middleware
allowed_origins = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

MAX_UPLOAD_BYTES = int(os.getenv("SQLSEED_MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))

config_loader = ConfigLoader()
orchestrators: Dict[str, DataOrchestrator] = {}


def require_api_key(x_api_key: Optional[str] = Header(default=None)):
    expected = os.getenv("API_KEY")
    if expected and x_api_key != expected:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")


def get_orchestrator(preset: Optional[str]) -> DataOrchestrator:
    """One orchestrator per preset, so parsed schemas are reused across requests"""
    name = preset or "default"
    if name not in orchestrators:
        if preset:
            try:
                config = config_loader.load_preset(preset)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
        else:
            config = get_default_config()
        orchestrators[name] = DataOrchestrator(config)
    return orchestrators[name]


def read_uploaded_schema(file: UploadFile) -> bytes:
    """Read an uploaded schema document"""
    content = file.file.read(MAX_UPLOAD_BYTES + 1)
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail=f"Schema document exceeds {MAX_UPLOAD_BYTES} bytes")
    if not content.strip():
        raise HTTPException(status_code=400, detail="Schema document is empty")
    return content


def parse_row_counts(row_counts: Optional[str]) -> Dict[str, int]:
    """Row count overrides sent as a JSON object"""
    if not row_counts:
        return {}
    try:
        parsed = json.loads(row_counts)
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=400, detail=f"row_counts is not valid JSON: {e}")
    if not isinstance(parsed, dict):
        raise HTTPException(status_code=400, detail="row_counts must be a JSON object of table -> count")
    return parsed


# Pydantic models
class TableSummary(BaseModel):
    """Planned table"""
    name: str
    rows: int = Field(..., ge=0, description="Rows that will be generated")
    columns: List[str]
    depends_on: List[str] = Field(default_factory=list, description="Referenced tables")
    generators: Dict[str, str] = Field(default_factory=dict)


class InspectionResult(BaseModel):
    """Schema inspection result"""
    order: List[str]
    tables: List[TableSummary]


# Error handlers
@app.exception_handler(SchemaError)
async def schema_error_handler(request: Request, exc: SchemaError):
    logger.info(f"Rejected schema: {exc}")
    return JSONResponse(
        status_code=422,
        content={"error": type(exc).__name__, "detail": str(exc), "location": exc.location},
    )


@app.exception_handler(SQLSeedError)
async def generation_error_handler(request: Request, exc: SQLSeedError):
    logger.info(f"Generation failed: {exc}")
    return JSONResponse(status_code=400, content={"error": type(exc).__name__, "detail": str(exc)})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"error": "InvalidRequest", "detail": str(exc)})


# API Endpoints

@app.get("/", tags=["General"])
async def root():
    """API root endpoint"""
    return {
        "name": "sqlseed API",
        "version": __version__,
        "status": "running",
        "endpoints": {
            "generate": "/generate",
            "inspect": "/inspect",
            "presets": "/presets",
        }
    }


@app.get("/health", tags=["General"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "cached_schemas": sum(len(o.cache) for o in orchestrators.values()),
    }


@app.post("/generate", tags=["Generation"])
def generate_archive(
    file: UploadFile = File(..., description="Schema document (XML, YAML or JSON)"),
    seed: Optional[int] = Form(None),
    row_counts: Optional[str] = Form(None, description='JSON object, e.g. {"users": 100}'),
    null_probability: Optional[float] = Form(None, ge=0.0, le=1.0),
    dialect: Optional[str] = Form(None),
    rows_per_statement: Optional[int] = Form(None, ge=0),
    anchor: Optional[str] = Form(None, description="ISO date closing the default date window"),
    preset: Optional[str] = Form(None),
    x_api_key: Optional[str] = Header(default=None),
):
    """
    Generate SQL test data

    Returns a ZIP archive with one INSERT script per table
    """
    require_api_key(x_api_key)
    document = read_uploaded_schema(file)
    orchestrator = get_orchestrator(preset)

    result = orchestrator.generate(
        document,
        row_counts=parse_row_counts(row_counts),
        seed=seed,
        null_probability=null_probability,
        dialect=dialect,
        rows_per_statement=rows_per_statement,
        anchor=anchor,
    )

    logger.info(f"Generated {result.metadata['num_rows']} rows for {file.filename} (seed={result.seed})")

    return StreamingResponse(
        io.BytesIO(result.archive),
        media_type="application/zip",
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename}"',
            "X-Generation-Seed": str(result.seed),
        }
    )


@app.post("/inspect", response_model=InspectionResult, tags=["Generation"])
def inspect_schema(
    file: UploadFile = File(..., description="Schema document (XML, YAML or JSON)"),
    row_counts: Optional[str] = Form(None),
    preset: Optional[str] = Form(None),
):
    """
    Inspect a schema document

    Returns the generation order and the plan for every table
    """
    document = read_uploaded_schema(file)
    plan = get_orchestrator(preset).plan(document, parse_row_counts(row_counts))

    tables = []
    for table_plan in plan.tables:
        table = table_plan.table
        tables.append(TableSummary(
            name=table.name,
            rows=table_plan.row_count,
            columns=table.column_names,
            depends_on=sorted({fk.referenced_table for fk in table.foreign_keys}),
            generators={name: generator.name for name, generator in table_plan.generators.items()},
        ))

    return InspectionResult(order=plan.order, tables=tables)


@app.get("/presets", tags=["Configuration"])
async def list_presets():
    """
    List available configuration presets
    """
    presets = config_loader.list_presets()

    return {
        "presets": presets,
        "count": len(presets)
    }


@app.get("/presets/{preset_name}", tags=["Configuration"])
async def get_preset(preset_name: str):
    """
    Get a configuration preset
    """
    try:
        config = config_loader.load_preset(preset_name)

        return {
            "preset_name": preset_name,
            "config": config.to_dict()
        }

    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


# Run with: uvicorn api:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
