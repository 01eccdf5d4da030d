"""Service layer: routines and notifications"""
