"""Minimal Flask web API for browsing photo folders and downloading them as archives.

Route handlers stay thin: each one maps a UI action (expand a folder, click
"Download ZIP", click "Download all") onto a `PhotosDownloader` call.
"""
import io
import logging

from flask import Flask, jsonify, redirect, request, send_file

from .config import PhotosConfig, load_config
from .download_photos import PhotosDownloader, setup_logging
from .photos_lib.delivery import RecordingDelivery
from .photos_lib.errors import OperationBusy, UserFacingFailure
from .photos_lib.operations import PREBUILT

logger = logging.getLogger('photos_zipper.webui')


def _no_pause(_seconds: float) -> None:
    # The browser spaces sequential downloads itself, using the `pause` we return
    return None


def create_app(downloader: PhotosDownloader = None, config: PhotosConfig = None) -> Flask:
    if downloader is None:
        config = config or load_config()
        setup_logging(config.download_dir, console=True)
        downloader = PhotosDownloader(config, sleep=_no_pause)

    app = Flask(__name__)
    app.config['PHOTOS_DOWNLOADER'] = downloader

    def _deliver(delivery: RecordingDelivery, outcome: str):
        if delivery.blob is not None:
            data, filename = delivery.blob
            return send_file(io.BytesIO(data), mimetype='application/zip', as_attachment=True,
                             download_name=filename)
        if outcome == PREBUILT and delivery.urls:
            url, _ = delivery.urls[0]
            return redirect(downloader.fetcher.url_for(url))
        return jsonify({
            'fallback': outcome,
            'pause': downloader.config.sequential_pause,
            'files': [{'url': downloader.fetcher.url_for(u), 'filename': name} for u, name in delivery.urls],
        })

    @app.errorhandler(UserFacingFailure)
    def _user_failure(e):
        return jsonify({'error': str(e)}), 404

    @app.errorhandler(OperationBusy)
    def _busy(e):
        return jsonify({'error': str(e)}), 409

    @app.route('/api/folders', methods=['GET'])
    def api_folders():
        roots = downloader.roots()
        return jsonify({'folders': [{'name': n.name, 'path': n.path} for n in roots]})

    @app.route('/api/folder', methods=['GET'])
    def api_folder():
        path = request.args.get('path', '').strip()
        if not path:
            return jsonify({'error': 'Missing path'}), 400
        node = downloader.expand(path)
        if node.error:
            return jsonify({'name': node.name, 'path': node.path, 'error': 'Failed to load contents'})
        return jsonify(node.to_dict())

    @app.route('/api/zip', methods=['GET'])
    def api_zip():
        target = request.args.get('path') or request.args.get('name')
        if not target:
            return jsonify({'error': 'Missing path or name'}), 400
        delivery = RecordingDelivery()
        try:
            outcome = downloader.download_folder(target, delivery=delivery)
        except UserFacingFailure:
            raise
        except Exception as e:
            logger.exception(f"Folder download failed for {target}")
            return jsonify({'error': f"Download failed: {e}"}), 500
        return _deliver(delivery, outcome)

    @app.route('/api/download_all', methods=['POST'])
    def api_download_all():
        delivery = RecordingDelivery()
        try:
            outcome = downloader.download_all(delivery=delivery)
        except (UserFacingFailure, OperationBusy):
            raise
        except Exception as e:
            logger.exception('downloadAll error')
            return jsonify({'error': f"Download failed: {e}"}), 500
        return _deliver(delivery, outcome)

    @app.route('/api/progress', methods=['GET'])
    def api_progress():
        return jsonify({'value': downloader.progress.value})

    @app.route('/api/config', methods=['GET'])
    def api_config():
        return jsonify(downloader.config.to_dict())

    return app


if __name__ == '__main__':
    create_app().run(debug=False, threaded=True)
