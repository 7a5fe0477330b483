from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
import os
import logging

from similarity import (
    DetectorOptions,
    ExitCode,
    ExitError,
    Language,
    SimilarityDetector,
    Submission,
    get_tokenizer,
    load_options,
)
from similarity.models import CompareRequest, CompareResponse

load_dotenv()

# Configure logging to both file and console
LOG_DIR = os.getenv("LOG_DIR", "logs")
os.makedirs(LOG_DIR, exist_ok=True)

# Set log level from environment (default: INFO)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
log_level = getattr(logging, LOG_LEVEL, logging.INFO)

# Create formatters
log_formatter = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

# Root logger configuration
root_logger = logging.getLogger()
root_logger.setLevel(log_level)

# Console handler (for docker logs)
console_handler = logging.StreamHandler()
console_handler.setFormatter(log_formatter)
root_logger.addHandler(console_handler)

# File handler (persistent logs)
log_file = os.path.join(LOG_DIR, "similarity.log")
file_handler = logging.FileHandler(log_file, encoding='utf-8')
file_handler.setFormatter(log_formatter)
root_logger.addHandler(file_handler)

# Configure uvicorn loggers to use the same format
for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
    logging.getLogger(name).handlers = [console_handler, file_handler]

logger = logging.getLogger(__name__)
logger.info(f"Logging initialized. Log file: {log_file}")

# Defaults for every request, optionally from a YAML file
SIMILARITY_CONFIG = os.getenv("SIMILARITY_CONFIG")
if SIMILARITY_CONFIG:
    DEFAULT_OPTIONS = load_options(SIMILARITY_CONFIG)
    logger.info(f"Loaded detector defaults from {SIMILARITY_CONFIG}")
else:
    DEFAULT_OPTIONS = DetectorOptions()

app = FastAPI()
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health():
    return {"status": "ok", "languages": [language.value for language in Language]}


@app.post("/compare", response_model=CompareResponse)
def compare(request: CompareRequest):
    names = [payload.name for payload in request.submissions]
    if len(names) != len(set(names)):
        raise HTTPException(status_code=400, detail="Submission names must be unique")

    try:
        tokenizer = get_tokenizer(request.language)
    except ExitError as e:
        raise HTTPException(status_code=400, detail=e.message)

    update = {
        "language": Language(request.language),
        "similarity_threshold": request.similarity_threshold,
        "similarity_metric": request.similarity_metric,
        "root_dir": None,
        "base_code": None,
    }
    if request.min_token_match is not None:
        update["min_token_match"] = request.min_token_match
    options = DEFAULT_OPTIONS.model_copy(update=update)

    detector = SimilarityDetector(options, tokenizer)
    logger.info(f"Compare request: {len(names)} submissions, language {request.language}")

    submissions = []
    for payload in request.submissions:
        detector.context.current_submission = payload.name
        submissions.append(Submission.from_sources(payload.name, payload.files, tokenizer, detector.context))

    base_code = None
    if request.base_code is not None:
        detector.context.current_submission = request.base_code.name
        base_code = Submission.from_sources(
            request.base_code.name, request.base_code.files, tokenizer, detector.context
        )

    try:
        result = detector.compare(submissions, base_code)
    except ExitError as e:
        logger.warning(f"Compare request rejected: {e.message}")
        status_code = 400 if e.code == ExitCode.BAD_PARAMETER else 422
        raise HTTPException(
            status_code=status_code,
            detail={"message": e.message, "code": e.code.value, "errors": detector.context.errors},
        )

    return CompareResponse.from_result(result, detector.context.errors, request.limit)
