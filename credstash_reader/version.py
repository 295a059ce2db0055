"""Credstash Reader Meta information.
   Credstash Reader fetches and decrypts versioned secrets stored
   in a credstash DynamoDB table using AWS KMS envelope encryption.
"""
__title__ = 'credstash_reader'
__description__ = (
   'Credstash Reader fetches and decrypts versioned secrets '
   'stored in a credstash DynamoDB table.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2023 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/phenobarbital/credstash-reader'
