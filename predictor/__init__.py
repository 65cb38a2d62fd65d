"""
Grade Predictor: module grades and degree classification for a course year.

Loads a course description (modules, credits, weighted tasks), takes the
scores a student has entered so far, and predicts each module grade, the
credit-weighted year average and the resulting UK classification band.
"""

__version__ = "0.1.0"
