#!/usr/bin/env python3
"""
Holomorph — FastAPI Backend
Parse and transform endpoints for browser front ends and scripts.
"""

import base64
import logging
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from fastapi import FastAPI, UploadFile, File, Form, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel

from core.expression import parse, ParseError, MAX_EXPRESSION_LENGTH
from core.polynomial import polynomial, rational, parse_coefficients
from core.resample import remap_image
from core.safety import DimensionMismatch, SafetyError, validate_dimensions
from core.transform import apply_transform
from core.video_io import decode_image, encode_png
from functions import list_functions, CATEGORIES, CATEGORY_ORDER

HOST = "127.0.0.1"
PORT = 7861
MAX_UPLOAD_SIZE = 50 * 1024 * 1024  # 50MB

app = FastAPI(title="Holomorph")


class ParseRequest(BaseModel):
    expression: str


class RawTransformRequest(BaseModel):
    expression: str
    width: int
    height: int
    pixels: str  # base64 RGB24, width * height * 3 bytes


def _parse_error_detail(e: ParseError) -> dict:
    return {
        "detail": e.reason,
        "code": "PARSE_ERROR",
        "position": e.position,
    }


def _resolve_tree(expression, coefficients, denominator):
    """Tree from an expression string, or from ascending coefficient lists.

    Raises HTTPException(400) when neither is given or either is malformed.
    """
    if coefficients:
        try:
            numerator = parse_coefficients(coefficients)
            if denominator:
                return rational(numerator, parse_coefficients(denominator))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Invalid coefficients: {e}")
        return polynomial(numerator)
    if not expression:
        raise HTTPException(status_code=400, detail="Provide an expression or coefficients")
    try:
        return parse(expression)
    except ParseError as e:
        raise HTTPException(status_code=400, detail=_parse_error_detail(e))


@app.get("/api/health")
async def health_check():
    return {"status": "ok"}


@app.get("/api/functions")
async def get_functions():
    """List callable functions grouped by category."""
    return {
        "functions": list_functions(),
        "categories": CATEGORIES,
        "category_order": CATEGORY_ORDER,
        "max_expression_length": MAX_EXPRESSION_LENGTH,
    }


@app.post("/api/parse")
async def parse_expression(req: ParseRequest):
    """Validate an expression and return its fully parenthesised form."""
    try:
        tree = parse(req.expression)
    except ParseError as e:
        raise HTTPException(status_code=400, detail=_parse_error_detail(e))
    return {"status": "ok", "tree": str(tree)}


@app.post("/api/transform")
async def transform_upload(
    file: UploadFile = File(...),
    expression: str | None = Form(None),
    coefficients: str | None = Form(None),
    denominator: str | None = Form(None),
):
    """Transform an uploaded image. Returns PNG bytes.

    The function is either `expression`, or a polynomial from `coefficients`
    (c0, c1, ... ascending) divided by one from `denominator` if given.
    """
    tree = _resolve_tree(expression, coefficients, denominator)

    data = await file.read(MAX_UPLOAD_SIZE + 1)
    if len(data) > MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {MAX_UPLOAD_SIZE // (1024 * 1024)}MB",
        )

    try:
        frame = decode_image(data)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Could not decode image: {e}")

    try:
        validate_dimensions(frame.shape[1], frame.shape[0])
        result = remap_image(frame, tree)
    except (DimensionMismatch, SafetyError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logging.exception("Transform failed")
        raise HTTPException(status_code=500, detail="Transform failed")

    return Response(content=encode_png(result), media_type="image/png")


@app.post("/api/transform/raw")
async def transform_raw(req: RawTransformRequest):
    """Transform a raw RGB24 buffer (base64 in, base64 out)."""
    try:
        pixels = base64.b64decode(req.pixels, validate=True)
    except ValueError:
        raise HTTPException(status_code=400, detail="pixels must be base64")

    try:
        out = apply_transform(pixels, req.width, req.height, req.expression)
    except ParseError as e:
        raise HTTPException(status_code=400, detail=_parse_error_detail(e))
    except (DimensionMismatch, SafetyError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logging.exception("Raw transform failed")
        raise HTTPException(status_code=500, detail="Transform failed")

    return {
        "width": req.width,
        "height": req.height,
        "pixels": base64.b64encode(out).decode("ascii"),
    }


def start(host: str = HOST, port: int = PORT):
    import uvicorn
    print(f"Holomorph — launching at http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="warning")


if __name__ == "__main__":
    start()
