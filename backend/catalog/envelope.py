"""Uniform JSON response envelope.

Every endpoint answers with ``{success, data?, error?, message?, meta?,
details?}`` whether the request succeeded or not.
"""
from flask import jsonify


def success(data=None, message=None, meta=None, status=200):
    body = {'success': True, 'data': data}
    if meta is not None:
        body['meta'] = meta
    if message:
        body['message'] = message
    return jsonify(body), status


def failure(error, status, details=None, **extra):
    body = {'success': False, 'error': error}
    if details:
        body['details'] = details
    body.update(extra)
    return jsonify(body), status
