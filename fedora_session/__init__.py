# Copyright 2008 Red Hat, Inc.
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
Fedora Session

Log into Fedora Services through the Fedora OpenID provider and talk to them
with the resulting session cookies.
'''
import logging

import kitchen.i18n
# Setup gettext for all of kitchen.
# Remember -- _() is for marking most messages
(_, N_) = kitchen.i18n.easy_gettext_setup('fedora-session')

from fedora_session import release
__version__ = release.VERSION

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ('__version__', 'client', 'release', 'urlutils')
