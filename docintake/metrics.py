"""
In-process counters for observability. Process-local; for multi-worker use external metrics (e.g. Prometheus).
"""
import threading

# OCR: pages sent to the vision service, and calls that failed/timed out/returned nothing.
ocr_pages_total: int = 0
ocr_failures_total: int = 0
_lock = threading.Lock()


def increment_ocr_pages_total() -> int:
    """Increment ocr_pages_total; return new value. Thread-safe."""
    global ocr_pages_total
    with _lock:
        ocr_pages_total += 1
        return ocr_pages_total


def increment_ocr_failures_total() -> int:
    """Increment ocr_failures_total; return new value. Thread-safe."""
    global ocr_failures_total
    with _lock:
        ocr_failures_total += 1
        return ocr_failures_total


def snapshot() -> dict[str, int]:
    """Current counter values (served on /health)."""
    with _lock:
        return {
            "ocr_pages_total": ocr_pages_total,
            "ocr_failures_total": ocr_failures_total,
        }
