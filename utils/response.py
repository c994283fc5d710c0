from flask import Response, jsonify


def json_response(message="success", data=None, code=200):
    resp = jsonify({"code": code, "message": message, "data": data})
    resp.status_code = code
    return resp


def file_response(content: str, filename: str, mimetype: str = "text/csv"):
    resp = Response(content, mimetype=f"{mimetype}; charset=utf-8")
    resp.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    return resp
