from typing import Any, Dict, Optional, Union
import json
import os
import datetime as dt

import pandas as pd
from pydantic import BaseModel
from sqlalchemy import create_engine

from schemas import TranscriptAnalysis, VitalsAnalysis
from utils.settings import StorageSettings, load_storage_settings


SCHEMA_COLUMNS = ["timestamp", "owner_id", "kind", "source", "level", "input", "annotation"]


def _now_iso():
    return dt.datetime.now(dt.timezone.utc).isoformat()


def build_record(owner_id: str, raw_input: Any,
                 annotation: Union[TranscriptAnalysis, VitalsAnalysis]) -> Dict[str, Any]:
    if isinstance(annotation, TranscriptAnalysis):
        kind, level = "transcript", annotation.ai_analysis.urgency_level
    else:
        kind, level = "vitals", annotation.risk_level
    if isinstance(raw_input, BaseModel):
        raw_input = raw_input.model_dump(mode="json", by_alias=True, exclude_none=True)
    return {
        "timestamp": _now_iso(),
        "owner_id": owner_id,
        "kind": kind,
        "source": annotation.source,
        "level": level,
        "input": json.dumps(raw_input, ensure_ascii=False),
        "annotation": json.dumps(annotation.to_json(), ensure_ascii=False),
    }


def log_record(owner_id: str, raw_input: Any,
               annotation: Union[TranscriptAnalysis, VitalsAnalysis],
               settings: Optional[StorageSettings] = None) -> Dict[str, Any]:
    settings = settings or load_storage_settings()
    record = build_record(owner_id, raw_input, annotation)
    df = pd.DataFrame([record], columns=SCHEMA_COLUMNS)
    if settings.mode == "csv":
        header = not os.path.exists(settings.csv_path)
        df.to_csv(settings.csv_path, mode="a", index=False, header=header)
    else:
        engine = create_engine(f"sqlite:///{settings.db_path}")
        df.to_sql("health_record", con=engine, if_exists="append", index=False)
    return record
