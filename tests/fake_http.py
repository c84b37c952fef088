# -*- coding: utf-8 -*-
""" Scripted stand-ins for the HTTP side of the tests. """

import json
from urllib.parse import urlparse

import requests
from requests.adapters import BaseAdapter
from requests.cookies import RequestsCookieJar


def make_response(url, status_code=200, body='', headers=None,
                  json_data=None):
    """Build a real :class:`requests.Response` without touching the net."""
    response = requests.models.Response()
    response.status_code = status_code
    response.url = url
    response.headers.update(headers or {})
    if json_data is not None:
        body = json.dumps(json_data)
        response.headers['Content-Type'] = 'application/json'
    response._content = body.encode('utf-8')
    response.encoding = 'utf-8'
    return response


def redirect(url, location, status_code=302):
    return make_response(url, status_code, headers={'Location': location})


class FakeSession(object):

    """Answers requests from a script instead of the network.

    Every scripted answer may come with cookies that the server "sets".
    """

    max_redirects = 30

    def __init__(self):
        self.cookies = RequestsCookieJar()
        self.headers = {}
        self.calls = []
        self._script = {}

    def reply(self, verb, url, response, cookies=None):
        self._script.setdefault((verb, url), []).append(
            (response, cookies or {}))

    def request(self, verb, url, **kwargs):
        self.calls.append((verb, url, kwargs))
        answers = self._script.get((verb, url))
        if not answers:
            raise AssertionError('Unhandled request %s %s (extra %s)'
                                 % (verb, url, kwargs))
        response, cookies = answers.pop(0)
        for name, value in cookies.items():
            self.cookies.set(name, value, domain=urlparse(url).hostname,
                             path='/')
        return response

    def get(self, url, **kwargs):
        return self.request('GET', url, **kwargs)

    def post(self, url, **kwargs):
        return self.request('POST', url, **kwargs)


class RecordingAdapter(BaseAdapter):

    """Transport adapter that records requests and answers with one reply."""

    def __init__(self, status_code=200, body='', json_data=None):
        super(RecordingAdapter, self).__init__()
        self.status_code = status_code
        self.body = body
        self.json_data = json_data
        self.requests = []

    def send(self, request, **kwargs):
        self.requests.append(request)
        response = make_response(request.url, self.status_code, self.body,
                                 json_data=self.json_data)
        response.request = request
        return response

    def close(self):
        pass
