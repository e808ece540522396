"""
Keyword Collector Web API - Flask Application
"""

import asyncio
import logging
import threading
from datetime import datetime

from flask import Flask, jsonify, request
from flask_socketio import SocketIO, emit

from collector.collector.exceptions import (
    CollectorError,
    JobStoreError,
    KeywordValidationError,
)
from collector.collector.models import KeywordResult
from collector.collector.validation import (
    normalize_expansion_request,
    normalize_hint_keyword,
)
from naver.core.exceptions import NaverAPIError
from settings.services import Services

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['SECRET_KEY'] = 'nkeyword-collector'
socketio = SocketIO(app, cors_allowed_origins="*", async_mode="threading")


class LoopThread:
    """Runs one asyncio loop in a daemon thread; request handlers submit coroutines to it"""

    def __init__(self):
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self.loop.run_forever, daemon=True)
        self._thread.start()

    def run(self, coro, timeout: float | None = None):
        """Block until coro finishes on the loop thread"""
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result(timeout)

    def spawn(self, coro):
        """Schedule coro without waiting"""
        return asyncio.run_coroutine_threadsafe(coro, self.loop)


# Wired by configure()
services: Services | None = None
runner: LoopThread | None = None


def configure(new_services: Services) -> None:
    """Attach services and start the background loop"""
    global services, runner
    services = new_services
    if runner is None:
        runner = LoopThread()
    runner.run(services.startup())
    logger.info("Web app configured")


def _error(message: str, status: int, details: str | None = None):
    body = {'success': False, 'error': message}
    if details:
        body['details'] = details
    return jsonify(body), status


def _results_payload(results: list[KeywordResult]) -> list[dict]:
    return [r.to_dict() for r in results]


# ==================== Background monitoring ====================

async def monitor_job(job_id: str) -> None:
    """Relay job progress to Socket.IO clients until the job is terminal"""
    poller = services.store_poller()

    def on_progress(current, total):
        socketio.emit('job_progress', {
            'jobId': job_id,
            'current': current,
            'total': total,
            'percentage': int((current / total) * 100) if total > 0 else 0,
        })

    def on_error(error):
        socketio.emit('job_error', {'jobId': job_id, 'error': str(error)})

    try:
        outcome = await poller.wait(job_id, on_progress=on_progress, on_error=on_error)
    except CollectorError as e:
        logger.warning(f"Monitoring of {job_id} stopped: {e}")
        socketio.emit('job_error', {'jobId': job_id, 'error': str(e), 'timeout': True})
        return

    socketio.emit('job_finished', {
        'jobId': job_id,
        'status': outcome.status.value,
        'results': _results_payload(outcome.results),
        'error': outcome.error,
    })


# ==================== Document count API ====================

@app.route('/api/documents/batch', methods=['POST'])
def start_batch():
    """Start a document-count batch for the given keywords"""
    data = request.get_json(silent=True) or {}
    keywords = data.get('keywords')

    try:
        submitted = runner.run(services.engine.submit(keywords))
    except KeywordValidationError as e:
        return _error(str(e), 400)
    except JobStoreError as e:
        logger.error(f"Batch submit failed: {e}", exc_info=True)
        return _error('Failed to start batch job', 500, str(e))

    body = {'success': True, 'jobId': submitted.job_id, **submitted.to_dict()}
    if submitted.status == 'cached':
        body['message'] = 'All keywords were cached'
    elif submitted.status == 'busy':
        body['message'] = 'A job is already running; resubmit the new keywords once it finishes'
    else:
        body['message'] = 'Batch job started'
        runner.spawn(monitor_job(submitted.job_id))

    return jsonify(body)


@app.route('/api/documents/status', methods=['GET'])
def batch_status():
    """Get one job, or all jobs when no jobId is given"""
    job_id = request.args.get('jobId')

    try:
        if job_id:
            job = runner.run(services.engine.status(job_id))
            if job is None:
                return _error('Job not found', 404)
            return jsonify({'success': True, 'job': job.to_dict()})

        jobs = runner.run(services.engine.list_jobs())
    except JobStoreError as e:
        logger.error(f"Status lookup failed: {e}", exc_info=True)
        return _error('Failed to read job status', 500, str(e))

    return jsonify({
        'success': True,
        'jobs': [job.to_dict() for job in jobs],
        'activeJobs': sum(1 for job in jobs if not job.status.is_terminal),
    })


@app.route('/api/documents/clear-cache', methods=['POST'])
def clear_cache():
    """Drop every cached document count"""
    cleared = services.engine.clear_cache()
    return jsonify({
        'success': True,
        'message': f'Cache cleared: {cleared} entries removed',
        'clearedCount': cleared,
    })


@app.route('/api/documents/count', methods=['GET'])
def document_count():
    """Document counts for a single keyword with one rotated key"""
    keyword = (request.args.get('keyword') or '').strip()
    if not keyword:
        return _error('Keyword is required', 400)

    try:
        key = services.rotator.next_open_api_key()
        counts = runner.run(services.open_search.get_document_counts(keyword, key))
    except NaverAPIError as e:
        logger.error(f"Document count failed for '{keyword}': {e}")
        return _error('Failed to get document counts', 500, str(e))

    return jsonify({'success': True, 'keyword': keyword, 'counts': counts.to_dict()})


# ==================== Keyword API ====================

@app.route('/api/keywords/related', methods=['GET'])
def related_keywords():
    """Related keywords for one hint keyword"""
    try:
        keyword = normalize_hint_keyword(request.args.get('keyword'))
    except KeywordValidationError as e:
        return _error(str(e), 400)

    try:
        records = runner.run(services.related.lookup(keyword))
    except NaverAPIError as e:
        logger.error(f"Related keyword lookup failed for '{keyword}': {e}")
        return _error('Failed to get related keywords', 500, str(e))

    return jsonify({
        'success': True,
        'keyword': keyword,
        'total': len(records),
        'keywords': [r.to_dict() for r in records],
    })


@app.route('/api/keywords/auto-collect', methods=['POST'])
def auto_collect():
    """Expand seed keywords into related keywords"""
    data = request.get_json(silent=True) or {}
    try:
        seeds, depth, parent_keyword, max_depth = normalize_expansion_request(
            data.get('seedKeywords'),
            data.get('depth', 0),
            data.get('parentKeyword'),
            data.get('maxDepth', 10),
        )
    except KeywordValidationError as e:
        return _error(str(e), 400)

    try:
        result = runner.run(
            services.expander.expand(seeds, depth, parent_keyword, max_depth)
        )
    except ValueError as e:
        return _error(str(e), 400)
    except JobStoreError as e:
        logger.error(f"Auto-collect failed: {e}", exc_info=True)
        return _error('Auto-collect failed', 500, str(e))

    return jsonify({'success': True, 'seedCount': len(seeds), **result.to_dict()})


@app.route('/api/keywords/history', methods=['GET'])
def collection_history():
    """Expansion history statistics"""
    return jsonify({'success': True, **services.tracker.stats()})


@app.route('/api/keywords/history', methods=['DELETE'])
def clear_collection_history():
    services.tracker.clear()
    return jsonify({'success': True})


# ==================== Health ====================

@app.route('/api/health', methods=['GET'])
def health():
    return jsonify({
        'success': True,
        'time': datetime.now().isoformat(),
        'keys': services.rotator.key_count(),
        'queueMode': services.config.queue_mode.value,
        'cacheSize': services.engine.cache.size(),
    })


# ==================== WebSocket Events ====================

@socketio.on('connect')
def handle_connect():
    """Handle client connection"""
    emit('status', {'keys': services.rotator.key_count()})
