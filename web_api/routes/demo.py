"""Demo routes exercising the request adapter and the response envelope."""

from flask import Blueprint
import logging

from jumper import (
    plug_request,
    plug_response,
    InvalidFileError,
    NoSuchFileError,
    FileOpenError,
    MissingTimeError,
    TimeFormatError,
)
from web_api.middleware.error_handler import handle_errors

logger = logging.getLogger('jumper.web_api')

BODY_ERROR_NUMBERS = {
    400: ("4000000", "BAD_REQUEST"),
    413: ("4130000", "TOO_LARGE"),
    500: ("5000000", "BAD_JSON"),
}

def register_routes(app):
    """Register demo routes with the Flask app."""

    bp = Blueprint('demo', __name__)

    @bp.route('/', methods=['GET'])
    @handle_errors
    def index():
        """Read a nested value out of a JSON-encoded query parameter."""
        res = plug_response()
        req = plug_request(res)

        listing = req.get_map("list") or {}
        obj = listing.get("obj") if isinstance(listing.get("obj"), dict) else {}
        ids = obj.get("id") if isinstance(obj.get("id"), list) else []
        first_id = ids[0] if ids else None
        logger.info(f"First id in list.obj: {first_id}")

        return res.reply_success("0000000", "SSSSSS", "Success", {"id": first_id})

    @bp.route('/echo', methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
    @handle_errors
    def echo():
        """Reply with everything the request adapter collected."""
        res = plug_response()
        req = plug_request(res)

        if req.parse_error is not None:
            number, code = BODY_ERROR_NUMBERS.get(res.response.status_code, ("4000000", "BAD_REQUEST"))
            return res.reply_failed(number, code, str(req.parse_error))

        return res.reply_success("0000000", "OK", "done", {
            'method': req.method,
            'params': dict(req.get_all()),
        })

    @bp.route('/upload', methods=['POST', 'PUT'])
    @handle_errors
    def upload():
        """Describe the files uploaded under the ``field`` parameter (default ``file``)."""
        res = plug_response()
        req = plug_request(res)
        field = req.get("field") or "file"

        try:
            files = [req.get_file(field)]
        except InvalidFileError:
            files = req.get_files(field)
        except NoSuchFileError as e:
            return res.set_http_code(400).reply_failed("4000001", "NO_FILE", str(e))
        except FileOpenError as e:
            return res.set_http_code(500).reply_failed("5000001", "FILE_ERROR", str(e))

        described = []
        for f in files:
            with f:
                described.append({
                    'filename': f.filename,
                    'content_type': f.content_type,
                    'size': f.size,
                })

        return res.reply_success("0000000", "OK", "done", {
            'field': field,
            'files': described,
            'params': dict(req.get_all()),
        })

    @bp.route('/items/<item_id>', methods=['GET'])
    @handle_errors
    def get_item(item_id):
        res = plug_response()
        req = plug_request(res)

        if not req.get_segment_uint64("item_id", default=None):
            return res.set_http_code(404).reply_failed("4040001", "NO_ITEM", f"No item {req.get_segment('item_id')!r}")

        return res.reply_success("0000000", "OK", "done", {
            'item_id': req.get_segment_uint64("item_id"),
            'verbose': req.get_bool("verbose"),
            'limit': req.get_int("limit", default=None),
        })

    @bp.route('/time', methods=['GET', 'POST'])
    @handle_errors
    def parse_time():
        res = plug_response()
        req = plug_request(res)

        try:
            at = req.get_time("at")
        except (MissingTimeError, TimeFormatError) as e:
            return res.set_http_code(400).reply_failed("4000002", "BAD_TIME", str(e))

        return res.reply_success("0000000", "OK", "done", {'at': at})

    app.register_blueprint(bp)
