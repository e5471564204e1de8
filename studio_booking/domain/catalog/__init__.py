"""Catalog domain - services offered by the studio"""
