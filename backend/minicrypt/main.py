from fastapi import FastAPI, UploadFile, File, HTTPException, Form
from fastapi.responses import Response, StreamingResponse
from fastapi.middleware.cors import CORSMiddleware
from . import affine_engine
from .affine_engine import JPEG_SIGNATURE, SIGNATURE_DIFFERENCE
from .byte_analysis import byte_analysis
from .rdes_engine import MiniDES
from .schemas import (
    AffineEncryptRequest, AffineDecryptRequest, AffineAttackRequest, AffineAttackResult,
    MiniDESEncryptRequest, MiniDESDecryptRequest, KeyScheduleResult,
    AnalysisRequest, AnalysisResult,
)
from . import __version__
import io
import os
import time
import logging
import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

# Configure logging
logger = logging.getLogger("uvicorn")

app = FastAPI(title="minicrypt", version=__version__)

# Global resources for file operations
MAX_CONCURRENT_FILE_OPS = int(os.getenv("MINICRYPT_MAX_CONCURRENT_OPS", "2"))
THREAD_WORKERS = int(os.getenv("MINICRYPT_THREAD_WORKERS", "4"))
MAX_UPLOAD_MB = int(os.getenv("MINICRYPT_MAX_UPLOAD_MB", "100"))

file_processing_semaphore = asyncio.Semaphore(MAX_CONCURRENT_FILE_OPS)
thread_pool = ThreadPoolExecutor(max_workers=THREAD_WORKERS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Affine-A", "X-Affine-B", "X-Attack-Time", "X-Image-Valid", "X-Round-Keys"]
)

# --- Helper Functions ---

async def _read_upload_file_limited(file: UploadFile, limit_mb: Optional[int] = None):
    limit_mb = limit_mb or MAX_UPLOAD_MB
    contents = await file.read()
    if len(contents) > limit_mb * 1024 * 1024:
        raise HTTPException(status_code=413, detail=f"File too large. Maximum size is {limit_mb}MB.")
    return contents

def _hex_to_bytes(value: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise ValueError("Invalid Hex String")

def _bytes_to_text(data: bytes) -> str:
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError:
        return data.hex()

def _download(content: bytes, filename: str, extra_headers: dict = None) -> Response:
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    if extra_headers:
        headers.update(extra_headers)
    return Response(content=content, media_type="application/octet-stream", headers=headers)

def _output_name(prefix: str, file: UploadFile) -> str:
    return f"{prefix}_{os.path.basename(file.filename or 'data.bin')}"

async def _run_file_op(label: str, file: UploadFile, func, *args):
    """Read the upload, run func(data, *args) in the thread pool, return (data, result, ms)."""
    async with file_processing_semaphore:
        try:
            logger.info(f"📥 {label}: reading {file.filename}")
            data = await _read_upload_file_limited(file)
            start_time = time.time()
            result = await asyncio.get_event_loop().run_in_executor(thread_pool, func, data, *args)
            elapsed = (time.time() - start_time) * 1000
            logger.info(f"✅ {label}: {len(data)} bytes in {elapsed:.2f}ms")
            return data, result, elapsed
        except HTTPException:
            raise
        except ValueError as e:
            logger.error(f"❌ {label} failed: {e}")
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            import traceback
            error_detail = f"{str(e)}\n{traceback.format_exc()}"
            logger.error(f"❌ FATAL ERROR in {label}: {error_detail}")
            raise HTTPException(status_code=500, detail=error_detail)

@app.get("/")
def read_root():
    return {
        "name": "minicrypt",
        "version": __version__,
        "ciphers": ["affine", "rdes"],
    }

# --- Affine cipher ---

@app.get("/affine/signature")
def get_affine_signature():
    return {
        "signature": list(JPEG_SIGNATURE),
        "signature_hex": bytes(JPEG_SIGNATURE).hex(),
        "difference": SIGNATURE_DIFFERENCE,
    }

@app.post("/affine/encrypt")
def affine_encrypt_text(req: AffineEncryptRequest):
    ciphertext = affine_engine.encrypt(req.plaintext.encode('utf-8'), req.a, req.b)
    return {"ciphertext": ciphertext.hex()}

@app.post("/affine/decrypt")
def affine_decrypt_text(req: AffineDecryptRequest):
    try:
        plaintext = affine_engine.decrypt(_hex_to_bytes(req.ciphertext), req.a, req.b)
        return {"plaintext": _bytes_to_text(plaintext)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.post("/affine/attack", response_model=AffineAttackResult)
def affine_attack_text(req: AffineAttackRequest):
    try:
        plaintext, key = affine_engine.attack_with_key(_hex_to_bytes(req.ciphertext))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"🔓 Affine key recovered: a={key.a}, b={key.b}")
    return {
        "plaintext_hex": plaintext.hex(),
        "a": key.a,
        "b": key.b,
        "looks_like_jpeg": byte_analysis.looks_like_jpeg(plaintext),
    }

@app.post("/affine/encrypt-file")
async def affine_encrypt_file(
    file: UploadFile = File(...),
    a: int = Form(...),
    b: int = Form(...)
):
    _, ciphertext, _ = await _run_file_op("affine encrypt", file, affine_engine.encrypt, a, b)
    return _download(ciphertext, _output_name("encrypted", file))

@app.post("/affine/decrypt-file")
async def affine_decrypt_file(
    file: UploadFile = File(...),
    a: int = Form(...),
    b: int = Form(...)
):
    _, plaintext, _ = await _run_file_op("affine decrypt", file, affine_engine.decrypt, a, b)
    return _download(plaintext, _output_name("decrypted", file))

def _attack_and_describe(data: bytes):
    plaintext, key = affine_engine.attack_with_key(data)
    return plaintext, key, byte_analysis.describe_image(plaintext)

@app.post("/affine/attack-file")
async def affine_attack_file(file: UploadFile = File(...)):
    _, (plaintext, key, image_info), elapsed = await _run_file_op("affine attack", file, _attack_and_describe)

    logger.info(f"🔓 Affine key recovered: a={key.a}, b={key.b} (decodable image: {image_info is not None})")

    return _download(plaintext, _output_name("recovered", file), {
        "X-Affine-A": str(key.a),
        "X-Affine-B": str(key.b),
        "X-Attack-Time": f"{elapsed:.3f}",
        "X-Image-Valid": "true" if image_info else "false",
    })

# --- Reduced DES ---

@app.get("/rdes/key-schedule/{key}", response_model=KeyScheduleResult)
def get_key_schedule(key: str):
    try:
        cipher = MiniDES(key)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"key": f"{cipher.key:03X}", "round_keys": cipher.round_keys_hex()}

@app.post("/rdes/encrypt")
def rdes_encrypt_text(req: MiniDESEncryptRequest):
    try:
        start_time = time.time()
        cipher = MiniDES(req.key)
        ciphertext = cipher.encrypt_text(req.plaintext)
        return {
            "ciphertext": ciphertext,
            "round_keys": cipher.round_keys_hex(),
            "runtime": time.time() - start_time,
        }
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.post("/rdes/decrypt")
def rdes_decrypt_text(req: MiniDESDecryptRequest):
    try:
        start_time = time.time()
        cipher = MiniDES(req.key)
        plaintext = cipher.decrypt_text(req.ciphertext)
        return {
            "plaintext": plaintext,
            "round_keys": cipher.round_keys_hex(),
            "runtime": time.time() - start_time,
        }
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

def _mini_des_or_400(key: str) -> MiniDES:
    try:
        return MiniDES(key)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.post("/rdes/encrypt-file")
async def rdes_encrypt_file(
    file: UploadFile = File(...),
    key: str = Form(...)
):
    cipher = _mini_des_or_400(key)
    _, ciphertext, _ = await _run_file_op("rdes encrypt", file, cipher.encrypt_bytes)
    return _download(ciphertext, _output_name("encrypted", file), {"X-Round-Keys": " ".join(cipher.round_keys_hex())})

@app.post("/rdes/decrypt-file")
async def rdes_decrypt_file(
    file: UploadFile = File(...),
    key: str = Form(...)
):
    cipher = _mini_des_or_400(key)
    _, plaintext, _ = await _run_file_op("rdes decrypt", file, cipher.decrypt_bytes)
    return _download(plaintext, _output_name("decrypted", file), {"X-Round-Keys": " ".join(cipher.round_keys_hex())})

# --- Analysis ---

@app.post("/analyze", response_model=AnalysisResult)
def analyze_bytes(req: AnalysisRequest):
    try:
        original = _hex_to_bytes(req.original)
        encrypted = _hex_to_bytes(req.encrypted)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return byte_analysis.compare(original, encrypted)

@app.post("/export-excel")
def export_excel(req: AnalysisRequest):
    try:
        original = _hex_to_bytes(req.original)
        encrypted = _hex_to_bytes(req.encrypted)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    output = io.BytesIO(byte_analysis.export_excel(original, encrypted))
    headers = {
        'Content-Disposition': 'attachment; filename="byte_frequencies.xlsx"'
    }
    return StreamingResponse(output, headers=headers, media_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet')
