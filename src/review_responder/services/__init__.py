"""Review Responder services package"""
