# -*- coding: utf-8 -*-
#
# Copyright (C) 2009  Red Hat, Inc.
# This file is part of fedora-session
#
# fedora-session is free software; you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public
# License as published by the Free Software Foundation; either
# version 2.1 of the License, or (at your option) any later version.
#
# fedora-session is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public
# License along with fedora-session; if not, see <http://www.gnu.org/licenses/>
#
'''
Functions to manipulate urls.

.. moduleauthor:: John (J5) Palmieri <johnp@redhat.com>
.. moduleauthor:: Toshio Kuratomi <tkuratom@redhat.com>
'''

from urllib.parse import parse_qsl, urljoin, urlparse


def absolute_url(beginning, end):
    '''Join two url parts if the last part does not start with the first.

    :arg beginning: Base url.  If it is empty, `end` is returned untouched.
    :arg end: Url fragment or complete url.
    :returns: The complete url.
    '''
    if not beginning:
        return end
    if not end.startswith(beginning):
        end = urljoin(beginning, end)
    return end


def query_params(uri):
    '''Return the query string of a uri as a dict.

    Similar to calling :func:`urllib.parse.parse_qs` except that every key
    maps to a single value.  When a key is repeated, the last value wins.
    Blank values are kept.

    :arg uri: URI to read the query string from
    :returns: dict of query parameter names to values
    '''
    return dict(parse_qsl(urlparse(uri).query, keep_blank_values=True))


__all__ = ['absolute_url', 'query_params']
