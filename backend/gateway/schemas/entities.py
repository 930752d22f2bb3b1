"""
Corpdata Gateway - Entity Row Schemas
======================================

What:  Shapes of the rows the read routes return, one model per table.
Who:   Referenced from route metadata so the OpenAPI document describes the
       arrays returned by GET /companies, /customers, /orders and /agents.

The tables belong to the database, not to this service. Rows are passed
through as the database reports them; these models document that shape and
are never used to validate or filter it.
"""

from typing import Optional

from pydantic import BaseModel, Field


class Company(BaseModel):
    COMPANY_ID: str = Field(examples=["45"])
    COMPANY_NAME: str = Field(examples=["Wendys"])
    COMPANY_CITY: str = Field(examples=["Charlotte"])


class Customer(BaseModel):
    CUST_CODE: str = Field(examples=["C00001"])
    CUST_NAME: Optional[str] = None
    CUST_CITY: Optional[str] = None
    WORKING_AREA: Optional[str] = None
    CUST_COUNTRY: Optional[str] = None
    GRADE: Optional[str] = None
    OPENING_AMT: Optional[str] = None
    RECEIVE_AMT: Optional[str] = None
    PAYMENT_AMT: Optional[str] = None
    OUTSTANDING_AMT: Optional[str] = None
    PHONE_NO: Optional[str] = None
    AGENT_CODE: Optional[str] = None


class Order(BaseModel):
    ORD_NUM: str = Field(examples=["200100"])
    ORD_AMOUNT: Optional[str] = None
    ADVANCE_AMOUNT: Optional[str] = None
    ORD_DATE: Optional[str] = None
    CUST_CODE: Optional[str] = None
    AGENT_CODE: Optional[str] = None
    ORD_DESCRIPTION: Optional[str] = None


class Agent(BaseModel):
    AGENT_CODE: str = Field(examples=["A007"])
    AGENT_NAME: Optional[str] = None
    WORKING_AREA: Optional[str] = Field(default=None, examples=["Bangalore"])
    COMMISSION: Optional[str] = Field(default=None, examples=["0.15"])
    PHONE_NO: Optional[str] = None
    COUNTRY: Optional[str] = None
