"""
Services: compose the store and the chain collaborator.

profile_sync: refresh the session cache from chain and record confirmed actions.
dashboard: read-side views over the session cache and both ledgers.
fortune: daily-fortune cooldown and profile display helpers.
"""
