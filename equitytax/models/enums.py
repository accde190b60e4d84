"""Enumerations for the equity tax estimator."""

from enum import StrEnum


class CompensationType(StrEnum):
    OPTIONS = "OPTIONS"
    RSU = "RSU"
