# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Web API transport used by tables."""
