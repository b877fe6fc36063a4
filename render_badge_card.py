#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Render a CR80 badge card preview from a JSON configuration.
"""

import badge_card_renderer.cli


if __name__ == "__main__":
	badge_card_renderer.cli.main()
