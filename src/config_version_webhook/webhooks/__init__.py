"""
Admission webhook for the config version webhook.

This module provides the mutating admission endpoint for apps/v1
Deployments and the AdmissionReview codec it decodes and encodes with.
The endpoint is served over HTTPS using the certificate mounted into the
pod (typically issued by cert-manager).
"""
