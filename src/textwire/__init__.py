# Copyright 2025, the textwire contributors
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
#
"""Text transformation client/server over TCP.

textwire sends one action and one text payload per connection,
and receives back the transformed text.
"""

from __future__ import annotations

__all__ = []  # type: list[str]

__author__ = "the textwire contributors"
__copyright__ = "Copyright (c) 2025, the textwire contributors"
__credits__ = ["the textwire contributors"]
__deprecated__ = False
__license__ = "Apache-2.0"
__maintainer__ = "the textwire contributors"
__status__ = "Development"
__version__ = "1.0.0"
